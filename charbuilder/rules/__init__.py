"""Rules engine: tag parsing, reference resolution, equipment and stats."""
