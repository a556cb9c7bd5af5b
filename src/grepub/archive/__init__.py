from .zip_reader import Container, open_container

__all__ = ["Container", "open_container"]
