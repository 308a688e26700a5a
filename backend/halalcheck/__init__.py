"""HalalCheck EU: ingredient-list halal compliance analysis."""
