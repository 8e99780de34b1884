"""Artifact built around the single-schema-merge engine."""

from supergraph_bridge.artifacts.worker import run
from supergraph_bridge.core.boundary import create_compose
from supergraph_bridge.engines.fed1 import compose_and_validate

compose = create_compose(compose_and_validate)


def main() -> None:
    run(compose)


if __name__ == "__main__":
    main()
