"""Flask blueprints exposing the scheduling services."""
