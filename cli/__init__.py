"""Command line entry points: ``serve`` runs the service, ``send`` feeds it readings."""
