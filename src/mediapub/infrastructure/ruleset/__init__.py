from .loader import bundled_ruleset, load_ruleset, parse_ruleset

__all__ = ["bundled_ruleset", "load_ruleset", "parse_ruleset"]
