"""
Test suite for the Kaleido lexer.

Tests cover:
- Keywords, identifiers and numbers
- Single-character tokens
- Comment elision
- Lenient numeric conversion

Author: xwest
"""

import io
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleido.lexer import Lexer, TokenType, tokenize_string, parse_lenient_float


def _kinds(source: str):
    return [token.type for token in tokenize_string(source)]


def _lexemes(source: str):
    return [token.lexeme for token in tokenize_string(source)]


class TestLexer(unittest.TestCase):
    """Test cases for the lexer."""
    
    def test_keywords(self):
        self.assertEqual(
            _kinds("def extern"),
            [TokenType.DEF, TokenType.EXTERN, TokenType.EOF]
        )
    
    def test_keywords_are_case_sensitive(self):
        tokens = tokenize_string("Def EXTERN")
        self.assertEqual(tokens[0].type, TokenType.IDENTIFIER)
        self.assertEqual(tokens[1].type, TokenType.IDENTIFIER)
    
    def test_identifier_with_digits(self):
        tokens = tokenize_string("x1y2")
        self.assertEqual(tokens[0].type, TokenType.IDENTIFIER)
        self.assertEqual(tokens[0].value, "x1y2")
    
    def test_keyword_prefix_is_identifier(self):
        tokens = tokenize_string("define")
        self.assertEqual(tokens[0].type, TokenType.IDENTIFIER)
        self.assertEqual(tokens[0].value, "define")
    
    def test_numbers(self):
        tokens = tokenize_string("42 3.14 .5")
        values = [token.value for token in tokens if token.type == TokenType.NUMBER]
        self.assertEqual(values, [42.0, 3.14, 0.5])
    
    def test_lenient_number_conversion(self):
        tokens = tokenize_string("1.2.3")
        self.assertEqual(len(tokens), 2)
        self.assertEqual(tokens[0].type, TokenType.NUMBER)
        self.assertEqual(tokens[0].lexeme, "1.2.3")
        self.assertEqual(tokens[0].value, 1.2)
    
    def test_parse_lenient_float(self):
        self.assertEqual(parse_lenient_float("007"), 7.0)
        self.assertEqual(parse_lenient_float("."), 0.0)
        self.assertEqual(parse_lenient_float("..5"), 0.0)
        self.assertEqual(parse_lenient_float("4."), 4.0)
    
    def test_number_followed_by_identifier(self):
        tokens = tokenize_string("2x")
        self.assertEqual(tokens[0].type, TokenType.NUMBER)
        self.assertEqual(tokens[1].type, TokenType.IDENTIFIER)
    
    def test_single_characters(self):
        tokens = tokenize_string("(a+b);")
        self.assertEqual(_lexemes("(a+b);"), ["(", "a", "+", "b", ")", ";", ""])
        self.assertTrue(tokens[0].is_char("("))
        self.assertEqual(tokens[2].ordinal, ord("+"))
    
    def test_unknown_characters_pass_through(self):
        tokens = tokenize_string("a % b")
        self.assertEqual(tokens[1].type, TokenType.CHAR)
        self.assertEqual(tokens[1].lexeme, "%")
    
    def test_ordinal_only_for_char_tokens(self):
        token = tokenize_string("abc")[0]
        with self.assertRaises(ValueError):
            token.ordinal
    
    def test_comments_are_skipped(self):
        self.assertEqual(_lexemes("# comment\n1+1"), _lexemes("1+1"))
    
    def test_comment_at_end_of_input(self):
        self.assertEqual(_kinds("x # trailing"), [TokenType.IDENTIFIER, TokenType.EOF])
    
    def test_comment_ends_at_carriage_return(self):
        self.assertEqual(_lexemes("#c\rx"), ["x", ""])
    
    def test_empty_input(self):
        self.assertEqual(_kinds(""), [TokenType.EOF])
        self.assertEqual(_kinds("   \n\t "), [TokenType.EOF])
    
    def test_eof_repeats(self):
        lexer = Lexer("")
        self.assertEqual(lexer.next_token().type, TokenType.EOF)
        self.assertEqual(lexer.next_token().type, TokenType.EOF)
    
    def test_pulls_from_stream_lazily(self):
        stream = io.StringIO("def f(x) x")
        lexer = Lexer(stream)
        self.assertEqual(lexer.next_token().type, TokenType.DEF)
        # 'def' plus the space that ended it
        self.assertEqual(stream.tell(), 4)
    
    def test_carry_over_character(self):
        lexer = Lexer("ab+")
        token = lexer.next_token()
        self.assertEqual(token.value, "ab")
        self.assertEqual(lexer.last_char, "+")
        self.assertTrue(lexer.next_token().is_char("+"))
    
    def test_non_ascii_letters_are_single_characters(self):
        tokens = tokenize_string("é")
        self.assertEqual(tokens[0].type, TokenType.CHAR)
        self.assertEqual(tokens[0].lexeme, "é")


if __name__ == "__main__":
    unittest.main()
