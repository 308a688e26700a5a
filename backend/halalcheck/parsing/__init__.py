from .ingredient_parser import IngredientParser, split_ingredient_text, build_parser_prompt

__all__ = ["IngredientParser", "split_ingredient_text", "build_parser_prompt"]
