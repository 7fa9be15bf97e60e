"""Services - the scoping, approval, audit and dashboard logic behind the routes."""
