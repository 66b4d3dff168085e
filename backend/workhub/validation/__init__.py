"""Business-rule validation for drafts submitted by actions."""
