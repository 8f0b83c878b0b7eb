"""Content and metadata stores the compiler resolves directives against."""

from pressroom.store.db import ContentDB, ExampleLookup
from pressroom.store.social import HTTPSocialStore, SocialFetchError, StaticSocialStore

__all__ = [
    "ContentDB",
    "ExampleLookup",
    "HTTPSocialStore",
    "SocialFetchError",
    "StaticSocialStore",
]
