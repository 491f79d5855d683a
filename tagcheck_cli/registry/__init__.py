"""Docker Registry V2 access: references, challenges, HTTP client and credentials."""
