"""Clients for the AWS control plane and the Kubernetes API."""
