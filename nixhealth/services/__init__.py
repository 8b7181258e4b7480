"""Services: snapshot gathering and the health run."""
