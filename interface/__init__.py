"""Entry points: REST API and terminal client."""
