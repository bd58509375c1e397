"""Run configuration: environment, YAML file and CLI overrides."""
