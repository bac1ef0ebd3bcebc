"""Mirror a Shopify store's theme assets and online-store content to disk and back."""

__version__ = "0.1.0"
