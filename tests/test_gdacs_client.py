"""Tests for the GDACS bulletin source."""

from datetime import datetime, timezone

import pytest

from conftest import failing_handler, mock_client, respond_with
from hazardfeed.api.gdacs_client import GdacsBulletinSource, extract_position, parse_rss_items
from hazardfeed.core.models import AlertSeverity, AlertType

RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss xmlns:gdacs="http://www.gdacs.org" xmlns:geo="http://www.w3.org/2003/01/geo/wgs84_pos#" version="2.0">
<channel>
  <title>GDACS RSS information</title>
  <item>
    <title>Orange earthquake alert (Magnitude 6.8M, Depth:10km) in Turkey 14/03/2025 15:05 UTC</title>
    <description><![CDATA[On 3/14/2025 3:05:00 PM, an earthquake of magnitude 6.8 occurred.]]></description>
    <link>https://www.gdacs.org/report.aspx?eventtype=EQ&amp;eventid=1400001</link>
    <pubDate>Fri, 14 Mar 2025 15:05:00 GMT</pubDate>
    <gdacs:alertlevel>Orange</gdacs:alertlevel>
    <gdacs:eventtype>EQ</gdacs:eventtype>
    <gdacs:eventid>1400001</gdacs:eventid>
    <gdacs:iso3>TUR</gdacs:iso3>
    <geo:Point><geo:lat>38.12</geo:lat><geo:long>37.45</geo:long></geo:Point>
  </item>
  <item>
    <title>Red tropical cyclone alert for FREDDY-23</title>
    <description>Maximum wind speed of 250 km/h</description>
    <link>https://www.gdacs.org/report.aspx?eventtype=TC&amp;eventid=1000998</link>
    <pubDate>Fri, 14 Mar 2025 12:00:00 GMT</pubDate>
    <gdacs:alertlevel>Red</gdacs:alertlevel>
    <georss:point>-17.5 40.2</georss:point>
  </item>
  <item>
    <title>Green flood alert in Brazil</title>
    <description>Flooding reported near -12.50, -45.25 after heavy rain.</description>
    <link>https://www.gdacs.org/floods/1102</link>
    <pubDate>Thu, 13 Mar 2025 08:00:00 GMT</pubDate>
    <gdacs:alertlevel>Green</gdacs:alertlevel>
  </item>
  <item>
    <title>Green drought alert</title>
    <description>No location given.</description>
    <link>https://www.gdacs.org/droughts/7</link>
  </item>
</channel>
</rss>
"""


class TestParseRssItems:
    def test_extracts_items_in_order(self):
        items = parse_rss_items(RSS)

        assert len(items) == 4
        assert items[0]["event_type"] == "EQ"
        assert items[0]["alert_level"] == "Orange"
        assert items[0]["description"].startswith("On 3/14/2025")
        assert items[0]["link"].endswith("eventtype=EQ&eventid=1400001")
        assert items[1]["point"] == "-17.5 40.2"

    def test_extract_position_sources(self):
        items = parse_rss_items(RSS)

        assert extract_position(items[0]) == (38.12, 37.45)
        assert extract_position(items[1]) == (-17.5, 40.2)
        assert extract_position(items[2]) == (-12.5, -45.25)
        assert extract_position(items[3]) is None

    def test_out_of_range_position_is_rejected(self):
        assert extract_position({"lat": "123.0", "long": "10.0"}) is None


class TestGdacsBulletinSource:
    @pytest.mark.asyncio
    async def test_normalizes_items(self):
        source = GdacsBulletinSource(client=mock_client(respond_with(text=RSS)))

        alerts = await source.fetch_alerts()

        assert [a.id for a in alerts] == ["gdacs-EQ1400001", "gdacs-TC1000998", "gdacs-1102"]

        quake, cyclone, flood = alerts
        assert quake.type is AlertType.EARTHQUAKE
        assert quake.severity is AlertSeverity.SEVERE
        assert quake.geometry.coordinates == [37.45, 38.12]
        assert quake.region_code == "TUR"
        assert quake.starts_at == datetime(2025, 3, 14, 15, 5, tzinfo=timezone.utc)
        assert quake.source == "GDACS"

        assert cyclone.type is AlertType.HURRICANE
        assert cyclone.severity is AlertSeverity.EXTREME

        assert flood.type is AlertType.FLOOD
        assert flood.severity is AlertSeverity.MODERATE
        assert flood.geometry.coordinates == [-45.25, -12.5]

    @pytest.mark.asyncio
    async def test_ids_are_deterministic(self):
        source = GdacsBulletinSource(client=mock_client(respond_with(text=RSS)))

        first = [a.id for a in await source.fetch_alerts()]
        second = [a.id for a in await source.fetch_alerts()]

        assert first == second

    @pytest.mark.asyncio
    async def test_empty_channel_returns_empty_list(self):
        body = "<rss><channel><title>none</title></channel></rss>"
        source = GdacsBulletinSource(client=mock_client(respond_with(text=body)))
        assert await source.fetch_alerts() == []

    @pytest.mark.asyncio
    async def test_non_rss_body_returns_empty_list(self):
        source = GdacsBulletinSource(client=mock_client(respond_with(text='{"features": []}')))
        assert await source.fetch_alerts() == []

    @pytest.mark.asyncio
    async def test_transport_failure_returns_empty_list(self):
        source = GdacsBulletinSource(client=mock_client(failing_handler))
        assert await source.fetch_alerts() == []


class TestNativeId:
    @pytest.mark.parametrize(
        "item,expected",
        [
            ({"event_type": "EQ", "event_id": "1400001"}, "EQ1400001"),
            ({"link": "https://www.gdacs.org/report.aspx?eventtype=TC&eventid=1000998"}, "TC1000998"),
            ({"link": "https://www.gdacs.org/report.aspx?eventid=1000998"}, "report.aspx?eventid=1000998"),
            ({"link": "https://www.gdacs.org/floods/1102/"}, "1102"),
            ({"guid": "urn:gdacs:42"}, "urn:gdacs:42"),
        ],
    )
    def test_fallback_order(self, item, expected):
        assert GdacsBulletinSource()._native_id(item) == expected

    def test_digest_when_nothing_identifies_the_item(self):
        item = {"title": "Flood", "pub_date": "Fri, 14 Mar 2025 15:05:00 GMT"}
        assert GdacsBulletinSource()._native_id(item) == GdacsBulletinSource()._native_id(dict(item))
