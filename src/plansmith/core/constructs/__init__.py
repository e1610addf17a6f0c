"""Construct tree, resolvers, and the synthesis worker."""

from plansmith.core.constructs.resolvers import (
    ResolutionPriority,
    Resolver,
    image_pull_secret_resolver,
    name_resolver,
    sort_resolvers,
)
from plansmith.core.constructs.tree import ApiObject, App, Chart, Construct, Node
from plansmith.core.constructs.worker import SynthesisWorker, default_worker

__all__ = [
    "ApiObject",
    "App",
    "Chart",
    "Construct",
    "Node",
    "ResolutionPriority",
    "Resolver",
    "SynthesisWorker",
    "default_worker",
    "image_pull_secret_resolver",
    "name_resolver",
    "sort_resolvers",
]
