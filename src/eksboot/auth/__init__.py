"""Cluster bootstrap: describe the cluster, mint a token, assemble the client config."""

from eksboot.auth.assembler import assemble
from eksboot.auth.descriptor import ClusterDescriptorFetcher, decode_ca_bundle
from eksboot.auth.token import TokenMinter, decode_token, exec_credential

__all__ = [
    "ClusterDescriptorFetcher",
    "TokenMinter",
    "assemble",
    "decode_ca_bundle",
    "decode_token",
    "exec_credential",
]
