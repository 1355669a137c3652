"""HTTP API for the Loadout Hub application."""
