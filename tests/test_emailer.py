import pytest

from pstu_inventory.core import emailer
from pstu_inventory.core.config import settings


class FakeServer:
    instances = []

    def __init__(self, host, port, context=None):
        self.host, self.port, self.context = host, port, context
        self.calls = []
        FakeServer.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append("login")

    def send_message(self, msg):
        self.calls.append(("send", msg["To"], msg["Subject"]))


class FakeSSLServer(FakeServer):
    pass


@pytest.fixture()
def smtp(monkeypatch):
    FakeServer.instances = []
    monkeypatch.setattr(emailer.smtplib, "SMTP", FakeServer)
    monkeypatch.setattr(emailer.smtplib, "SMTP_SSL", FakeSSLServer)
    monkeypatch.setattr(settings, "SMTP_HOST", "mail.pstu.ac.bd")
    monkeypatch.setattr(settings, "SMTP_USER", "inventory@pstu.ac.bd")
    monkeypatch.setattr(settings, "SMTP_PASSWORD", "pw")
    return FakeServer.instances


@pytest.mark.parametrize("use_ssl, use_tls, server_cls, calls", [
    (True, True, FakeSSLServer, ["login"]),
    (False, True, FakeServer, ["starttls", "login"]),
    (False, False, FakeServer, ["login"]),
])
def test_transport_follows_settings(smtp, monkeypatch, use_ssl, use_tls, server_cls, calls):
    monkeypatch.setattr(settings, "SMTP_SSL", use_ssl)
    monkeypatch.setattr(settings, "SMTP_TLS", use_tls)

    emailer.send_email("store@pstu.ac.bd", "Stock received", "10 x Projector", html="<p>10 x Projector</p>")

    (server, ) = smtp
    assert type(server) is server_cls
    assert server.calls == calls + [("send", "store@pstu.ac.bd", "Stock received")]


def test_recipient_is_required(smtp):
    with pytest.raises(ValueError):
        emailer.send_email("", "Subject", "Body")
    assert smtp == []
