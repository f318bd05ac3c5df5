import logging


def get_logger(name: str = "cachevis"):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    return logging.getLogger(name)


def set_verbosity(verbose: bool):
    logging.getLogger("cachevis").setLevel(logging.DEBUG if verbose else logging.INFO)
