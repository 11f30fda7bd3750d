"""Aggregated Kubernetes cluster discovery.

This package folds clusters reported by many discovery sources into one
view per cluster name, classified by registration and credential health:
- models: Pydantic data models
- sources: discovery sources (kubeconfig, inventory, EKS, AKS)
- services: merge engine, status resolver, aggregated store, sync
- persistence / repositories: durable snapshot storage
- config: Configuration management
- observability: Structured logging
"""

__version__ = "0.1.0"
