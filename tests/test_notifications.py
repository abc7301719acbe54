"""
Tests for notification fan-out, read flags and expiry.
"""
from datetime import timedelta

from portal.models.notification import NEW_JOB
from portal.services.notification_service import linkify
from portal.utils import utcnow


def new_job_notes(services, user):
    return [n for n in services.notifications.list_notifications(user.id) if n.type == NEW_JOB]


def test_job_creation_notifies_every_agency_once(services, job, admin, agency_a, agency_b):
    for agency in (agency_a, agency_b):
        notes = new_job_notes(services, agency)
        assert len(notes) == 1
        assert notes[0].job_id == job.id
        assert notes[0].job_deadline == job.deadline
        assert notes[0].message == "A new job has been posted: Backend Engineer"
        assert notes[0].read is False
        assert notes[0].expired is False
    assert services.notifications.list_notifications(admin.id) == []


def test_job_creation_emails_agencies(services, job, dispatcher, sender):
    dispatcher.wait()
    assert sorted(m[0] for m in sender.sent) == ["hr@acme.test", "jobs@brighthire.test"]
    subject, html = sender.to("hr@acme.test")[0][1:]
    assert subject == "New Job Posted: Backend Engineer"
    assert '<a href="https://careers.example.com/backend"' in html
    assert "Applicable till:" in html


def test_one_failing_email_does_not_stop_the_others(services, admin, agency_a, agency_b, dispatcher, sender, caplog):
    sender.fail_for.add("hr@acme.test")
    job = services.jobs.create_job("QA Engineer", "Testing", utcnow() + timedelta(days=2))
    dispatcher.wait()

    assert [m[0] for m in sender.sent] == ["jobs@brighthire.test"]
    assert "hr@acme.test" in caplog.text
    assert len(new_job_notes(services, agency_a)) == 1
    assert services.jobs.get_job(job.id).title == "QA Engineer"


def test_notification_store_failure_does_not_undo_job(services, db, admin, agency_a, agency_b, monkeypatch, dispatcher, sender):
    original = db.insert_notification

    def flaky_insert(doc):
        if doc["recipient_user_id"] == agency_a.id:
            raise RuntimeError("write concern timeout")
        return original(doc)

    monkeypatch.setattr(db, "insert_notification", flaky_insert)
    job = services.jobs.create_job("SRE", "Pager duty", utcnow() + timedelta(days=2))

    assert services.jobs.get_job(job.id).id == job.id
    assert new_job_notes(services, agency_a) == []
    assert len(new_job_notes(services, agency_b)) == 1
    # the email attempt is still made for the agency whose record failed
    dispatcher.wait()
    assert len(sender.to("hr@acme.test")) == 1


def test_mark_all_read_scoped_to_recipient(services, job, agency_a, agency_b):
    assert services.notifications.mark_all_read(agency_a.id) == 1
    assert all(n.read for n in services.notifications.list_notifications(agency_a.id))
    assert not any(n.read for n in services.notifications.list_notifications(agency_b.id))
    assert services.notifications.mark_all_read(agency_a.id) == 0


def test_notifications_listed_newest_first(services, job, agency_a):
    later = services.jobs.create_job("Second Role", "More", utcnow() + timedelta(days=5))
    notes = services.notifications.list_notifications(agency_a.id)
    assert [n.job_id for n in notes] == [later.id, job.id]


def test_deleting_job_expires_its_notifications(services, job, agency_a, agency_b):
    services.jobs.delete_job(job.id)
    for agency in (agency_a, agency_b):
        assert [n.expired for n in new_job_notes(services, agency)] == [True]


def test_sweep_expires_past_deadline_and_deleted_jobs(services, db, admin, agency_a):
    live = services.jobs.create_job("Live", "open", utcnow() + timedelta(days=3))
    soon = services.jobs.create_job("Soon", "closing", utcnow() + timedelta(hours=1))
    gone = services.jobs.create_job("Gone", "deleted", utcnow() + timedelta(days=3))
    db.delete_job(gone.id)

    assert services.notifications.mark_expired_notifications(now=utcnow() + timedelta(hours=2)) == 2

    expired = {n.job_id: n.expired for n in new_job_notes(services, agency_a)}
    assert expired == {live.id: False, soon.id: True, gone.id: True}
    assert services.notifications.mark_expired_notifications(now=utcnow() + timedelta(hours=2)) == 0


def test_quotes_in_description_stay_inside_the_link():
    out = linkify('Apply: https://careers.example.com/a"onmouseover="alert(1) <b>now</b>')
    assert '"onmouseover' not in out
    assert 'href="https://careers.example.com/a&quot;onmouseover=&quot;alert(1)"' in out
    assert "&lt;b&gt;now&lt;/b&gt;" in out


def test_job_email_escapes_quoted_url(services, admin, agency_a, dispatcher, sender):
    services.jobs.create_job("Ops", 'See https://x.example.com/"><script>x()</script>', utcnow() + timedelta(days=1))
    dispatcher.wait()
    html = sender.to("hr@acme.test")[0][2]
    assert "<script>" not in html
    assert '"><' not in html
