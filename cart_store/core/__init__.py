"""Core storage machinery: tiers, codec, probe, configuration."""
