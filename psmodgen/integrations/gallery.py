from __future__ import annotations
from typing import Optional
import xml.etree.ElementTree as ET

import requests

from psmodgen.core.errors import GalleryError, VersionFormatError
from psmodgen.versioning.bump import parse_version

_ATOM = "{http://www.w3.org/2005/Atom}"
_DATA = "{http://schemas.microsoft.com/ado/2007/08/dataservices}"
_META = "{http://schemas.microsoft.com/ado/2007/08/dataservices/metadata}"


def needs_publish(local: str, published: Optional[str]) -> bool:
    """A module that was never published counts as 0.0.0."""
    return parse_version(local) > parse_version(published or "0.0.0")


class GalleryClient:
    """Read-only lookups against the PowerShell Gallery OData (v2) feed."""

    def __init__(self, api_base: str = "https://www.powershellgallery.com/api/v2", timeout: float = 30,
                 session: Optional[requests.Session] = None):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, url: str, params: dict | None = None) -> requests.Response:
        try:
            r = self.session.get(url, params=params, timeout=self.timeout,
                                 headers={"Accept": "application/atom+xml"})
        except requests.RequestException as e:
            raise GalleryError(f"Gallery request failed: {e}") from e
        return r

    def list_versions(self, name: str) -> list[str]:
        url: Optional[str] = f"{self.api_base}/FindPackagesById()"
        params: dict | None = {"id": f"'{name}'"}
        versions: list[str] = []
        while url:
            r = self._get(url, params)
            if r.status_code == 404:
                return versions
            if not r.ok:
                raise GalleryError(f"Gallery returned HTTP {r.status_code} for {name}")
            try:
                feed = ET.fromstring(r.content)
            except ET.ParseError as e:
                raise GalleryError(f"Unreadable gallery response for {name}: {e}") from e

            for entry in feed.iter(f"{_ATOM}entry"):
                props = entry.find(f"{_META}properties")
                if props is None:
                    continue
                v = props.findtext(f"{_DATA}Version")
                if v:
                    versions.append(v.strip())

            url, params = None, None
            for link in feed.findall(f"{_ATOM}link"):
                if link.get("rel") == "next" and link.get("href"):
                    url = link.get("href")
        return versions

    def latest_version(self, name: str) -> Optional[str]:
        best: Optional[str] = None
        for v in self.list_versions(name):
            try:
                key = parse_version(v)
            except VersionFormatError:
                # prerelease labels such as 1.2.0-beta1 are never the publish baseline
                continue
            if best is None or key > parse_version(best):
                best = v
        return best
