# Client layers
