"""EKS Bootstrap (eksboot).

Obtain an authenticated Kubernetes client for an EKS cluster from a stateless invocation,
using a freshly minted, IAM-derived bearer token.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"
