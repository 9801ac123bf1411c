import pytest
from botocore.exceptions import ClientError
from sqlalchemy.exc import OperationalError

from theralink import storage
from theralink.domain.therapists.repository import TherapistRepository
from theralink.models import Profile, Therapist


def _db_down(*args, **kwargs):
    raise OperationalError("UPDATE", {}, Exception("db down"))

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeS3:
    def __init__(self, existing=(), fail_list=False, fail_put=False):
        self.objects = {key: b"old" for key in existing}
        self.fail_list = fail_list
        self.fail_put = fail_put
        self.put_calls = []

    def list_objects_v2(self, Bucket, Prefix, MaxKeys):
        if self.fail_list:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "ListObjectsV2")
        return {"Contents": [{"Key": k} for k in self.objects if k.startswith(Prefix)]}

    def delete_objects(self, Bucket, Delete):
        for obj in Delete["Objects"]:
            self.objects.pop(obj["Key"], None)

    def put_object(self, **params):
        if self.fail_put:
            raise ClientError({"Error": {"Code": "InternalError", "Message": "down"}}, "PutObject")
        self.put_calls.append(params)
        self.objects[params["Key"]] = params["Body"]


@pytest.fixture
def fake_s3(monkeypatch):
    def _install(**kwargs):
        s3 = FakeS3(**kwargs)
        monkeypatch.setattr(storage, "get_storage_client", lambda: s3)
        return s3

    return _install


def _upload(client, name="me.png", content=PNG, content_type="image/png"):
    return client.post("/therapists/me/profile-image", files={"file": (name, content, content_type)})


class TestProfileImageUpload:
    def test_replaces_old_avatar(self, client, db, make_profile, login, fake_s3):
        profile = make_profile("therapist")
        s3 = fake_s3(existing=[f"{profile.id}/avatar-1.jpg", "someone-else/avatar-1.jpg"])
        login(profile)

        response = _upload(client)

        assert response.status_code == 200
        body = response.json()
        assert body["key"].startswith(f"{profile.id}/avatar-")
        assert body["key"].endswith(".png")
        assert body["url"] == f"https://cdn.example.com/avatars/{body['key']}"
        assert f"{profile.id}/avatar-1.jpg" not in s3.objects
        assert "someone-else/avatar-1.jpg" in s3.objects
        put = s3.put_calls[0]
        assert put["Bucket"] == "avatars"
        assert put["ContentType"] == "image/png"
        assert put["CacheControl"] == "max-age=3600"
        db.expire_all()
        assert db.get(Profile, profile.id).profile_image_url == body["url"]

    def test_cleanup_failure_does_not_block_upload(self, client, make_profile, login, fake_s3):
        s3 = fake_s3(fail_list=True)
        login(make_profile("client"))

        response = _upload(client, name="me.webp", content_type="image/webp")

        assert response.status_code == 200
        assert len(s3.put_calls) == 1

    def test_upload_failure_keeps_old_url(self, client, db, make_profile, login, fake_s3):
        profile = make_profile("therapist", profile_image_url="https://cdn.example.com/avatars/old.png")
        fake_s3(fail_put=True)
        login(profile)

        response = _upload(client)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to upload image"
        db.expire_all()
        assert db.get(Profile, profile.id).profile_image_url == "https://cdn.example.com/avatars/old.png"

    def test_saving_url_failure_returns_500(self, client, db, make_profile, login, fake_s3, monkeypatch):
        profile = make_profile("therapist", profile_image_url="https://cdn.example.com/avatars/old.png")
        fake_s3()
        login(profile)
        monkeypatch.setattr(TherapistRepository, "set_profile_image", staticmethod(_db_down))

        response = _upload(client)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to update profile image"
        db.expire_all()
        assert db.get(Profile, profile.id).profile_image_url == "https://cdn.example.com/avatars/old.png"

    @pytest.mark.parametrize(
        "name, content, content_type, detail",
        [
            ("big.png", b"x" * (5 * 1024 * 1024 + 1), "image/png", "File size must be less than 5MB"),
            ("doc.png", PNG, "application/pdf", "Please select a valid image file"),
            ("anim.gif", PNG, "image/gif", "Please select a JPG, PNG, or WebP image"),
            ("empty.png", b"", "image/png", "You must select an image to upload."),
        ],
    )
    def test_rejects_invalid_files(self, client, make_profile, login, fake_s3, name, content, content_type, detail):
        s3 = fake_s3()
        login(make_profile("therapist"))

        response = _upload(client, name=name, content=content, content_type=content_type)

        assert response.status_code == 400
        assert response.json()["detail"] == detail
        assert s3.put_calls == []


class TestAdminTherapists:
    @pytest.fixture
    def roster(self, make_profile, make_therapist):
        make_therapist(
            profile=make_profile("therapist", full_name="Grace Wanjiru", location="Nairobi"),
            specialization="Trauma",
            is_verified=True,
            license_number="KE-123",
            application_status="approved",
        )
        make_therapist(
            profile=make_profile("therapist", full_name="Peter Kamau", location="Mombasa"),
            specialization="Couples",
            is_verified=True,
            application_status="approved",
        )
        pending = make_therapist(
            profile=make_profile("therapist", full_name="Lucy Achieng", location="Kisumu"),
            specialization="Grief",
        )
        return pending

    def test_lists_all(self, client, make_profile, login, roster):
        login(make_profile("admin"))

        body = client.get("/admin/therapists").json()

        assert {t["full_name"] for t in body} == {"Grace Wanjiru", "Peter Kamau", "Lucy Achieng"}

    @pytest.mark.parametrize(
        "status, names",
        [
            ("verified", {"Grace Wanjiru", "Peter Kamau"}),
            ("pending", {"Lucy Achieng"}),
            ("active", {"Grace Wanjiru"}),
        ],
    )
    def test_status_filter(self, client, make_profile, login, roster, status, names):
        login(make_profile("admin"))

        body = client.get("/admin/therapists", params={"status": status}).json()

        assert {t["full_name"] for t in body} == names

    def test_search_is_case_insensitive(self, client, make_profile, login, roster):
        login(make_profile("admin"))

        by_location = client.get("/admin/therapists", params={"search": "NAIROBI"}).json()
        by_specialty = client.get("/admin/therapists", params={"search": "coup"}).json()

        assert [t["full_name"] for t in by_location] == ["Grace Wanjiru"]
        assert [t["full_name"] for t in by_specialty] == ["Peter Kamau"]

    def test_verification_update(self, client, make_profile, login, roster):
        login(make_profile("admin"))

        approved = client.patch(f"/admin/therapists/{roster.id}/verification", json={"is_verified": True})
        rejected = client.patch(f"/admin/therapists/{roster.id}/verification", json={"is_verified": False})

        assert approved.json()["application_status"] == "approved"
        assert approved.json()["is_verified"] is True
        assert rejected.json()["application_status"] == "rejected"
        assert rejected.json()["is_verified"] is False

    def test_verification_unknown_therapist(self, client, make_profile, login):
        login(make_profile("admin"))

        response = client.patch("/admin/therapists/nobody/verification", json={"is_verified": True})

        assert response.status_code == 404

    def test_verification_failure_returns_500(self, client, db, make_profile, login, roster, monkeypatch):
        login(make_profile("admin"))
        monkeypatch.setattr(TherapistRepository, "update_therapist", staticmethod(_db_down))

        response = client.patch(f"/admin/therapists/{roster.id}/verification", json={"is_verified": True})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to update therapist"
        db.expire_all()
        assert not db.get(Therapist, roster.id).is_verified

    def test_admin_only(self, client, make_profile, login, roster):
        login(make_profile("therapist"))
        assert client.get("/admin/therapists").status_code == 403
