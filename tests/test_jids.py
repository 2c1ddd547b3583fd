from __future__ import annotations

from core.jids import is_group_jid, jid_user, normalize_jid, split_jid


def test_group_detection_uses_suffix_only() -> None:
    assert is_group_jid("12036302@g.us")
    assert not is_group_jid("123@s.whatsapp.net")
    assert not is_group_jid(None)
    assert not is_group_jid("")


def test_jid_user_falls_back_to_whole_value() -> None:
    assert jid_user("123@s.whatsapp.net") == "123"
    assert jid_user("no-separator") == "no-separator"
    assert jid_user(None) == ""


def test_split_jid_without_separator() -> None:
    assert split_jid("12345") is None
    assert split_jid("1@g.us") == ("1", "g.us")


def test_normalize_strips_device_and_agent() -> None:
    assert normalize_jid("123:4@s.whatsapp.net") == "123@s.whatsapp.net"
    assert normalize_jid("123_1:2@s.whatsapp.net") == "123@s.whatsapp.net"


def test_normalize_maps_legacy_server() -> None:
    assert normalize_jid(" 123@C.US ") == "123@s.whatsapp.net"
    assert normalize_jid("team@g.us") == "team@g.us"


def test_normalize_rejects_values_without_separator() -> None:
    assert normalize_jid("12345") is None
    assert normalize_jid("@s.whatsapp.net") is None
    assert normalize_jid("123@") is None
