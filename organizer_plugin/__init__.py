"""Ground Item Organizer plugin package."""
