"""Translation services: document engine, fan-out and provider clients."""
