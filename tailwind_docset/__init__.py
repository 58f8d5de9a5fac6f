"""Build a Dash docset for the Tailwind CSS documentation."""

__version__ = "1.0.0"
