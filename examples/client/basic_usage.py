"""
Basic usage example of OtrustClient.

This example creates a key pair if none exists, logs in to the server,
publishes a claim and adds a proof to it.
"""

import logging
import sys
from pathlib import Path

# Add the project root to the path to import otrust
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from otrust import OtrustClient, OtrustError, ServerError


def main() -> None:
    # Configure logging
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    try:
        # Create a client with the settings from ~/.otrust/config.json
        client = OtrustClient(log_level=logging.INFO)

        info = client.init()
        logger.info("Key pair %s", "generated" if info.created else "already present")

        try:
            client.login()
        except ServerError as err:
            if err.status != 401:  # noqa: PLR2004
                raise
            # Unknown key, register it first
            client.register()
        logger.info("Logged in to %s", client.server)

        created = client.create_claim(
            {
                "claim": "The Eiffel Tower is located in Paris",
                "evidence": ["https://en.wikipedia.org/wiki/Eiffel_Tower"],
                "type": "factual",
                "semantic": {
                    "subject": "Eiffel Tower",
                    "predicate": "located_in",
                    "object": "Paris",
                },
            }
        )
        claim_id = created["id"]
        logger.info("Claim created: %s", claim_id)

        proof = client.add_proof(
            {"claimId": claim_id, "action": "confirmed", "confidence": 0.9}
        )
        logger.info("Credibility now: %s", proof.get("credibility"))

        logger.info("Basic usage example completed")
    except OtrustError:
        logger.exception("Error")
        sys.exit(1)


if __name__ == "__main__":
    main()
