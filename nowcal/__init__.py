"""nowcal - ambient display of the calendar event happening right now."""
