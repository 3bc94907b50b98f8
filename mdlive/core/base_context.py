"""Dictionary with attribute access used as the base of registries and contexts."""


class BaseContext(dict):
    """A dict whose keys can also be read and written as attributes."""

    def __getattr__(self, name: str):
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(f"{self.__class__.__name__} has no attribute {name}") from e

    def __setattr__(self, name: str, value):
        self[name] = value

    def __delattr__(self, name: str):
        try:
            del self[name]
        except KeyError as e:
            raise AttributeError(f"{self.__class__.__name__} has no attribute {name}") from e
