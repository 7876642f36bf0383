"""District street map: geodata acquisition, caching, labelling and search."""
