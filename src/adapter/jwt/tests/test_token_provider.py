"""Unit tests for JoseTokenProvider."""

import unittest

from jose import jwt

from adapter.jwt.token_provider import JoseTokenProvider
from domain.model.errors import TokenError

SECRET = "test-secret-key-that-is-long-enough-for-hs512"


class TestJoseTokenProvider(unittest.TestCase):

    def setUp(self):
        self.provider = JoseTokenProvider(SECRET)

    def test_issue_embeds_subject_and_issue_time(self):
        token = self.provider.issue('ana@x.com')

        claims = jwt.get_unverified_claims(token)
        header = jwt.get_unverified_header(token)
        self.assertEqual(claims['sub'], 'ana@x.com')
        self.assertIn('iat', claims)
        self.assertNotIn('exp', claims)
        self.assertEqual(header['alg'], 'HS512')

    def test_subject_of_round_trip(self):
        token = self.provider.issue('ana@x.com')

        self.assertEqual(self.provider.subject_of(token), 'ana@x.com')
        self.assertTrue(self.provider.verify(token))

    def test_token_from_other_key_is_rejected(self):
        token = JoseTokenProvider("another-secret").issue('ana@x.com')

        with self.assertRaises(TokenError):
            self.provider.subject_of(token)
        self.assertFalse(self.provider.verify(token))

    def test_same_secret_verifies_across_instances(self):
        token = JoseTokenProvider(SECRET).issue('ana@x.com')

        self.assertEqual(JoseTokenProvider(SECRET).subject_of(token), 'ana@x.com')

    def test_malformed_and_empty_tokens_are_rejected(self):
        for token in ('', '   ', 'not-a-jwt', 'a.b.c'):
            with self.subTest(token=token):
                with self.assertRaises(TokenError):
                    self.provider.subject_of(token)
                self.assertFalse(self.provider.verify(token))

    def test_other_algorithm_is_rejected(self):
        token = jwt.encode({'sub': 'ana@x.com'}, SECRET, algorithm='HS256')

        self.assertFalse(self.provider.verify(token))

    def test_token_without_subject_is_rejected(self):
        token = jwt.encode({'iat': 1}, SECRET, algorithm='HS512')

        with self.assertRaises(TokenError):
            self.provider.subject_of(token)

    def test_from_secret_generates_random_key_when_missing(self):
        first = JoseTokenProvider.from_secret(None)
        second = JoseTokenProvider.from_secret("")

        token = first.issue('ana@x.com')
        self.assertTrue(first.verify(token))
        self.assertFalse(second.verify(token))

    def test_empty_secret_rejected_by_constructor(self):
        with self.assertRaises(ValueError):
            JoseTokenProvider("")


if __name__ == '__main__':
    unittest.main()
