"""Request signing for the recognition service."""

from .tc3 import sign_tc3
from .sha1 import sign_query
from .params import build_params, canonical_query, encode_component
from .signer import Signer
from .request import SignedRequest

__all__ = [
    "SignedRequest",
    "Signer",
    "build_params",
    "canonical_query",
    "encode_component",
    "sign_query",
    "sign_tc3",
]
