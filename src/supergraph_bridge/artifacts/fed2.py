"""Artifact built around the hint-emitting engine."""

from supergraph_bridge.artifacts.worker import run
from supergraph_bridge.core.boundary import create_compose
from supergraph_bridge.engines.fed2 import compose_services

compose = create_compose(compose_services)


def main() -> None:
    run(compose)


if __name__ == "__main__":
    main()
