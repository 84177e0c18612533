from typing import Optional


class PokedexError(Exception):
    """Base class for every failure raised by the catalog engine."""


class RemoteFetchFailed(PokedexError):
    def __init__(self, kind: str, cause: str, status_code: Optional[int] = None):
        self.kind = kind
        self.cause = cause
        self.status_code = status_code
        super().__init__(f"PokeAPI fetch failed ({kind}): {cause}")


class CatalogLoadFailed(PokedexError):
    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(f"Catalog load failed: {cause}" if cause else "Catalog load failed")


class RegionMapLoadFailed(PokedexError):
    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(f"Region map load failed: {cause}" if cause else "Region map load failed")


class GenerationLoadFailed(PokedexError):
    def __init__(self, gen_id: int, cause: Optional[BaseException] = None):
        self.gen_id = gen_id
        self.cause = cause
        super().__init__(f"Generation {gen_id} species load failed: {cause}")


class CatalogNotReady(PokedexError):
    def __init__(self, message: str = "Catalog is not loaded yet; try again once loading has finished"):
        super().__init__(message)


class ClassificationFailed(PokedexError):
    def __init__(self, cause: str, configured: bool = True):
        self.cause = cause
        # False when the classifier has no API key; the HTTP layer reports 503 instead of 502
        self.configured = configured
        super().__init__(f"Classification failed: {cause}")
