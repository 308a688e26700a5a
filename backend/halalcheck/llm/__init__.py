from .client import TextGenerator
from .replies import parse_json_reply, split_reply_lines

__all__ = ["TextGenerator", "parse_json_reply", "split_reply_lines"]
