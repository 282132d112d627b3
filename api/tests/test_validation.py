import unittest

from core.errors import ValidationError
from posts import validation as post_validation
from users import validation as user_validation

VALID_SIGNUP = {
    "name": "Alice",
    "username": "alice",
    "email": "alice@example.com",
    "password": "secret123",
}


def fields_of(result):
    return {e.field for e in result.errors}


class SignupValidationTests(unittest.TestCase):
    def test_valid_payload(self):
        result = user_validation.validate_signup(VALID_SIGNUP)
        self.assertTrue(result.ok)
        self.assertEqual(result.value.username, "alice")

    def test_missing_fields_are_reported(self):
        result = user_validation.validate_signup({"name": "Alice"})
        self.assertFalse(result.ok)
        self.assertEqual(fields_of(result), {"username", "email", "password"})

    def test_email_needs_two_domain_segments(self):
        for email in ("alice", "alice@example", "alice@@example.com", "a b@example.com"):
            result = user_validation.validate_signup({**VALID_SIGNUP, "email": email})
            self.assertFalse(result.ok, email)
            self.assertEqual(fields_of(result), {"email"})

    def test_password_length_bounds(self):
        cases = {"ab": False, "abc": True, "a" * 30: True, "a" * 31: False}
        for password, expected in cases.items():
            result = user_validation.validate_signup({**VALID_SIGNUP, "password": password})
            self.assertEqual(result.ok, expected, password)

    def test_password_charset(self):
        result = user_validation.validate_signup({**VALID_SIGNUP, "password": "secret!23"})
        self.assertFalse(result.ok)
        self.assertEqual(fields_of(result), {"password"})

    def test_non_object_body(self):
        result = user_validation.validate_signup(["not", "an", "object"])
        self.assertFalse(result.ok)

    def test_unwrap_raises_validation_error(self):
        result = user_validation.validate_signup({})
        with self.assertRaises(ValidationError) as ctx:
            result.unwrap()
        self.assertEqual(len(ctx.exception.errors), 4)


class ProfileUpdateValidationTests(unittest.TestCase):
    def test_everything_is_optional(self):
        result = user_validation.validate_profile_update({})
        self.assertTrue(result.ok)
        self.assertIsNone(result.value.bio)

    def test_empty_strings_count_as_absent(self):
        result = user_validation.validate_profile_update({"username": "", "email": "", "password": ""})
        self.assertTrue(result.ok)
        self.assertIsNone(result.value.username)
        self.assertIsNone(result.value.email)
        self.assertIsNone(result.value.password)

    def test_whitespace_is_kept(self):
        result = user_validation.validate_profile_update({"bio": "   "})
        self.assertTrue(result.ok)
        self.assertEqual(result.value.bio, "   ")

    def test_bio_limit(self):
        self.assertTrue(user_validation.validate_profile_update({"bio": "x" * 256}).ok)
        self.assertFalse(user_validation.validate_profile_update({"bio": "x" * 257}).ok)

    def test_camel_case_keys(self):
        result = user_validation.validate_profile_update({"profilePic": "https://img.example/a.png"})
        self.assertTrue(result.ok)
        self.assertEqual(result.value.profile_pic, "https://img.example/a.png")

    def test_bad_email(self):
        result = user_validation.validate_profile_update({"email": "nope"})
        self.assertFalse(result.ok)
        self.assertEqual(fields_of(result), {"email"})


class PostValidationTests(unittest.TestCase):
    def test_text_of_500_chars_is_accepted(self):
        result = post_validation.validate_create_post({"postedBy": "u1", "text": "x" * 500})
        self.assertTrue(result.ok)
        self.assertEqual(result.value.posted_by, "u1")

    def test_text_of_501_chars_is_rejected(self):
        result = post_validation.validate_create_post({"postedBy": "u1", "text": "x" * 501})
        self.assertFalse(result.ok)
        self.assertEqual(fields_of(result), {"text"})

    def test_text_is_required(self):
        result = post_validation.validate_create_post({"postedBy": "u1"})
        self.assertEqual(fields_of(result), {"text"})

    def test_author_is_required(self):
        result = post_validation.validate_create_post({"text": "hello"})
        self.assertFalse(result.ok)
        self.assertEqual(fields_of(result), {"postedBy"})
        with self.assertRaises(ValidationError):
            result.unwrap()

    def test_empty_text_message_is_plain(self):
        result = post_validation.validate_create_post({"postedBy": "u1", "text": ""})
        self.assertEqual([e.message for e in result.errors], ["Text field is required."])

    def test_reply_text_must_not_be_empty(self):
        self.assertFalse(post_validation.validate_reply({"text": ""}).ok)
        self.assertTrue(post_validation.validate_reply({"text": "   "}).ok)
        self.assertTrue(post_validation.validate_reply({"text": "nice"}).ok)


if __name__ == "__main__":
    unittest.main()
