"""
Batch lookup example of OtrustClient.

Fetches several claims concurrently. A claim that cannot be fetched does
not stop the others; each result carries either data or an error.
"""

import logging
import sys
from pathlib import Path

# Add the project root to the path to import otrust
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from otrust import OtrustClient


def main(claim_ids: list[str]) -> None:
    # Configure logging
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    client = OtrustClient(log_level=logging.INFO)
    results = client.get_claims(claim_ids, max_workers=4)

    for result in results:
        if result.ok:
            claim = (result.data or {}).get("claim") or {}
            logger.info("%s: %s", result.claim_id, claim.get("claim"))
        else:
            logger.error("%s: %s", result.claim_id, result.error)

    if not all(result.ok for result in results):
        sys.exit(1)


if __name__ == "__main__":
    main(sys.argv[1:] or ["claim-1", "claim-2"])
