from importlib import resources


def load_codes() -> str:
    with resources.files(__package__).joinpath("data/codes.md").open("r", encoding="utf-8") as fh:
        return fh.read()
