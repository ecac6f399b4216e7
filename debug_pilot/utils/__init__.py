"""Text and environment helpers shared by the drivers."""
