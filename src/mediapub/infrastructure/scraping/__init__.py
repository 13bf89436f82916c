from .metadata_scraper import HtmlMetadataScraper

__all__ = ["HtmlMetadataScraper"]
