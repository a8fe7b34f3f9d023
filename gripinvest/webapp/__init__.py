"""Flask REST API for the Grip Invest platform."""
