import unittest
from unittest import mock

from fastapi import Response

from auth import security
from core.errors import (
    Conflict,
    Forbidden,
    Internal,
    InvalidCredentials,
    NotFound,
    SelfReferenceError,
)
from main import create_memory_store
from users import schemas, service, validation
from tests.support import TEST_SETTINGS, make_user, refresh


class SignupLoginTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = create_memory_store()

    async def test_signup_stores_salted_digest(self):
        alice = await make_user(self.store, "alice", password="samepass1")
        bob = await make_user(self.store, "bob", password="samepass1")

        alice_row = await self.store.users.get_by_id(alice.id)
        bob_row = await self.store.users.get_by_id(bob.id)
        self.assertNotEqual(alice_row["password_hash"], "samepass1")
        self.assertNotEqual(alice_row["password_hash"], bob_row["password_hash"])
        self.assertTrue(security.verify_password("samepass1", alice_row["password_hash"]))

    async def test_signup_returns_summary_and_sets_cookie(self):
        response = Response()
        payload = schemas.SignupRequest(name="Carol", username="carol", email="Carol@Example.com", password="abc123")
        user = await service.signup(self.store, payload, response=response, settings=TEST_SETTINGS)

        body = user.to_json()
        self.assertEqual(set(body), {"id", "name", "email", "username"})
        self.assertEqual(body["email"], "carol@example.com")
        self.assertIn("jwt=", response.headers["set-cookie"])

    async def test_signup_conflicts_on_email_or_username(self):
        await make_user(self.store, "alice")
        same_email = schemas.SignupRequest(name="A", username="other", email="alice@example.com", password="abc123")
        same_username = schemas.SignupRequest(name="A", username="alice", email="new@example.com", password="abc123")
        for payload in (same_email, same_username):
            with self.assertRaises(Conflict):
                await service.signup(self.store, payload, response=Response(), settings=TEST_SETTINGS)

    async def test_login_success(self):
        alice = await make_user(self.store, "alice", password="secret123")
        response = Response()
        payload = schemas.LoginRequest(email="alice@example.com", password="secret123")
        user = await service.login(self.store, payload, response=response, settings=TEST_SETTINGS)
        self.assertEqual(user.id, alice.id)
        self.assertIn("jwt=", response.headers["set-cookie"])

    async def test_login_failures_are_indistinguishable(self):
        await make_user(self.store, "alice", password="secret123")
        wrong_password = schemas.LoginRequest(email="alice@example.com", password="wrong123")
        unknown_email = schemas.LoginRequest(email="nobody@example.com", password="secret123")

        messages = []
        for payload in (wrong_password, unknown_email):
            response = Response()
            with self.assertRaises(InvalidCredentials) as ctx:
                await service.login(self.store, payload, response=response, settings=TEST_SETTINGS)
            self.assertNotIn("set-cookie", response.headers)
            messages.append(ctx.exception.message)
        self.assertEqual(messages[0], messages[1])

    async def test_logout_revokes_cookie(self):
        response = Response()
        result = await service.logout(response=response, settings=TEST_SETTINGS)
        self.assertIn("message", result)
        self.assertIn("max-age=0", response.headers["set-cookie"].lower())


class FollowTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = create_memory_store()
        self.alice = await make_user(self.store, "alice")
        self.bob = await make_user(self.store, "bob")

    async def relation(self):
        alice = await self.store.users.get_by_id(self.alice.id)
        bob = await self.store.users.get_by_id(self.bob.id)
        return self.bob.id in alice["following"], self.alice.id in bob["followers"]

    async def test_toggle_alternates_and_stays_symmetric(self):
        result = await service.follow_unfollow(self.store, self.bob.id, self.alice)
        self.assertTrue(result["following"])
        self.assertEqual(await self.relation(), (True, True))

        result = await service.follow_unfollow(self.store, self.bob.id, self.alice)
        self.assertFalse(result["following"])
        self.assertEqual(await self.relation(), (False, False))

        await service.follow_unfollow(self.store, self.bob.id, self.alice)
        self.assertEqual(await self.relation(), (True, True))

    async def test_follow_and_unfollow_are_idempotent(self):
        await service.follow_user(self.store, self.bob.id, self.alice)
        await service.follow_user(self.store, self.bob.id, self.alice)
        alice = await self.store.users.get_by_id(self.alice.id)
        self.assertEqual(alice["following"], [self.bob.id])

        await service.unfollow_user(self.store, self.bob.id, self.alice)
        await service.unfollow_user(self.store, self.bob.id, self.alice)
        self.assertEqual(await self.relation(), (False, False))

    async def test_cannot_follow_self(self):
        with self.assertRaises(SelfReferenceError):
            await service.follow_unfollow(self.store, self.alice.id, self.alice)
        alice = await self.store.users.get_by_id(self.alice.id)
        self.assertEqual(alice["following"], [])
        self.assertEqual(alice["followers"], [])

    async def test_missing_target(self):
        with self.assertRaises(NotFound):
            await service.follow_unfollow(self.store, "missing-id", self.alice)


class ProfileTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = create_memory_store()
        self.alice = await make_user(self.store, "alice")
        self.bob = await make_user(self.store, "bob")

    async def update(self, caller, target_id, body):
        payload = validation.validate_profile_update(body).unwrap()
        return await service.update_profile(self.store, target_id, caller, payload, settings=TEST_SETTINGS)

    async def test_cannot_update_someone_else(self):
        with self.assertRaises(Forbidden):
            await self.update(self.alice, self.bob.id, {"bio": "hijacked"})
        bob = await self.store.users.get_by_id(self.bob.id)
        self.assertEqual(bob["bio"], "")

    async def test_partial_update_keeps_absent_and_falsy_fields(self):
        await self.update(self.alice, self.alice.id, {"bio": "first bio"})
        user = await self.update(self.alice, self.alice.id, {"name": "Alice A.", "username": ""})

        self.assertEqual(user.bio, "first bio")
        self.assertEqual(user.username, "alice")
        self.assertEqual(user.name, "Alice A.")
        self.assertNotIn("password", user.to_json())
        self.assertNotIn("passwordHash", user.to_json())
        self.assertIn("updatedAt", user.to_json())

    async def test_password_is_rehashed(self):
        await self.update(self.alice, self.alice.id, {"password": "newpass42"})
        row = await self.store.users.get_by_id(self.alice.id)
        self.assertNotEqual(row["password_hash"], "newpass42")

        payload = schemas.LoginRequest(email="alice@example.com", password="newpass42")
        user = await service.login(self.store, payload, response=Response(), settings=TEST_SETTINGS)
        self.assertEqual(user.id, self.alice.id)

    async def test_taken_username_conflicts(self):
        with self.assertRaises(Conflict):
            await self.update(self.alice, self.alice.id, {"username": "bob"})

    async def test_taken_email_conflicts(self):
        with self.assertRaises(Conflict):
            await self.update(self.alice, self.alice.id, {"email": "Bob@Example.com"})
        alice = await self.store.users.get_by_id(self.alice.id)
        self.assertEqual(alice["email"], "alice@example.com")

    async def test_update_for_deleted_account(self):
        self.store.users.reset()
        with self.assertRaises(NotFound):
            await self.update(self.alice, self.alice.id, {"bio": "hello"})

    async def test_get_profile_hides_password_and_update_time(self):
        profile = await service.get_profile(self.store, "alice")
        body = profile.to_json()
        self.assertEqual(body["username"], "alice")
        self.assertNotIn("password", body)
        self.assertNotIn("passwordHash", body)
        self.assertNotIn("updatedAt", body)
        self.assertEqual(body["followers"], [])

    async def test_get_profile_unknown(self):
        with self.assertRaises(NotFound):
            await service.get_profile(self.store, "nobody")

    async def test_me_reflects_current_record(self):
        await self.update(self.alice, self.alice.id, {"bio": "hello"})
        me = await service.me(self.store, await refresh(self.store, self.alice))
        self.assertEqual(me.bio, "hello")

    async def test_unexpected_failure_becomes_internal(self):
        with mock.patch.object(
            self.store.users, "get_by_username", mock.AsyncMock(side_effect=RuntimeError("db is down"))
        ):
            with self.assertRaises(Internal) as ctx:
                await service.get_profile(self.store, "alice")
        self.assertEqual(ctx.exception.message, "db is down")
        self.assertEqual(ctx.exception.status_code, 500)


if __name__ == "__main__":
    unittest.main()
