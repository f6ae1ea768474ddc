"""
Unit tests for IPv4 range matching.
"""

import pytest

from service_ruler.app.rules.value import Value, ip_to_u32, ip_in_range, U32_MASK


class TestIpToU32:
    """Test cases for the dotted-quad conversion."""

    @pytest.mark.parametrize("address,expected", [
        ("0.0.0.0", 0),
        ("1.2.3.4", 0x01020304),
        ("127.255.255.255", 0x7FFFFFFF),
        ("128.0.0.0", 0x80000000),
        ("255.255.255.255", U32_MASK),
        (" 10.0.0.1 ", 0x0A000001),
    ])
    def test_valid_addresses(self, address, expected):
        """Test conversion stays unsigned above 127.x."""
        assert ip_to_u32(address) == expected

    @pytest.mark.parametrize("address", [
        "1.2.3", "1.2.3.4.5", "256.0.0.1", "a.b.c.d", "1.2.3.-4", "1..3.4", "", None, 16909060,
    ])
    def test_invalid_addresses(self, address):
        """Test malformed addresses convert to None."""
        assert ip_to_u32(address) is None


class TestInIpRange:
    """Test cases for Value.in_ip_range."""

    @pytest.mark.parametrize("ip,notation,expected", [
        ("192.168.1.10", "192.168.1.0/24", True),
        ("192.168.2.10", "192.168.1.0/24", False),
        ("10.0.0.5", "10.0.0.1-10.0.0.10", True),
        ("10.0.0.11", "10.0.0.1-10.0.0.10", False),
        ("10.0.0.1", "10.0.0.1-10.0.0.10", True),
        ("10.0.0.10", "10.0.0.1-10.0.0.10", True),
        ("10.0.0.5", "10.0.*.*", True),
        ("10.1.0.5", "10.0.*.*", False),
        ("1.2.3.4", "not-a-range", False),
    ])
    def test_reference_cases(self, ip, notation, expected):
        """Test the three notations on typical inputs."""
        assert Value(ip).in_ip_range(Value(notation)) is expected

    @pytest.mark.parametrize("ip,notation,expected", [
        ("192.168.1.10", "192.168.1/24", True),
        ("192.168.1.10", "192.168/16", True),
        ("192.169.1.10", "192.168/16", False),
        ("8.8.8.8", "0.0.0.0/0", True),
        ("10.0.0.1", "10.0.0.1/32", True),
        ("10.0.0.2", "10.0.0.1/32", False),
        ("255.255.255.254", "255.255.255.0/24", True),
        ("200.1.2.3", "128.0.0.0/1", True),
        ("100.1.2.3", "128.0.0.0/1", False),
    ])
    def test_cidr(self, ip, notation, expected):
        """Test CIDR prefixes, including padded networks and high addresses."""
        assert Value(ip).in_ip_range(Value(notation)) is expected

    @pytest.mark.parametrize("ip,notation,expected", [
        ("192.168.1.10", "192.168.1.0/255.255.255.0", True),
        ("192.168.2.10", "192.168.1.0/255.255.255.0", False),
        ("192.168.2.10", "192.168.1.0/255.255.*.*", True),
        ("172.16.5.4", "172.16.0.0/255.240.0.0", True),
    ])
    def test_dotted_netmask(self, ip, notation, expected):
        """Test dotted netmasks, with * read as 0."""
        assert Value(ip).in_ip_range(Value(notation)) is expected

    @pytest.mark.parametrize("ip,notation,expected", [
        ("200.1.2.3", "200.0.0.0-200.255.255.255", True),
        ("128.0.0.1", "10.0.0.0-127.255.255.255", False),
        ("255.255.255.255", "255.255.255.0-255.255.255.255", True),
        ("240.1.1.1", "*.*.*.*", True),
    ])
    def test_high_addresses_do_not_overflow(self, ip, notation, expected):
        """Test range bounds above 127.x compare as unsigned."""
        assert Value(ip).in_ip_range(Value(notation)) is expected

    def test_sequence_of_ranges(self):
        """Test the first matching range wins and garbage entries are skipped."""
        ranges = ["garbage", 7, None, "172.16.0.0/12", "10.0.0.0/8"]

        assert Value("10.20.30.40").in_ip_range(Value(ranges)) is True
        assert Value("11.20.30.40").in_ip_range(Value(ranges)) is False

    @pytest.mark.parametrize("notation", [
        "10.0.0.0/33",
        "10.0.0.0/abc",
        "10.0.0.0/",
        "1.2.3.4.5/8",
        "10.0.0.300-10.0.0.5",
        "10.0.0.1-",
        "10.0.0.0/255.255.0",
        "1.2.3.4",
        "",
    ])
    def test_malformed_ranges_do_not_match(self, notation):
        """Test malformed specs fail open to no match without raising."""
        assert Value("10.0.0.1").in_ip_range(Value(notation)) is False

    @pytest.mark.parametrize("ip", ["999.1.1.1", "10.0.0", "localhost", None, 167772161, ["10.0.0.1"]])
    def test_malformed_address_does_not_match(self, ip):
        """Test a malformed candidate address never matches."""
        assert Value(ip).in_ip_range(Value("0.0.0.0/0")) is False

    @pytest.mark.parametrize("ranges", [None, 42, {"net": "10.0.0.0/8"}])
    def test_invalid_range_operand(self, ranges):
        """Test range operands that are neither text nor a sequence."""
        assert Value("10.0.0.1").in_ip_range(Value(ranges)) is False

    def test_ip_in_range_reports_malformed_as_none(self):
        """Test the single-range helper distinguishes malformed from no match."""
        ip = ip_to_u32("10.0.0.1")

        assert ip_in_range(ip, "10.0.0.0/8") is True
        assert ip_in_range(ip, "11.0.0.0/8") is False
        assert ip_in_range(ip, "bogus") is None
