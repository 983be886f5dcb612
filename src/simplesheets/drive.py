"""
Async wrappers for the parts of the Drive v3 API a spreadsheet needs as a
file: listing, deleting and sharing.
"""
from dataclasses import dataclass, field
from typing import List

from .access import GWSAccess
from .resources import GoogleWorkSpaceResourceBase
from .retry import RetryPolicy
from .sheets.ops import run

SPREADSHEET_MIME_TYPE = "application/vnd.google-apps.spreadsheet"
OWNED_SPREADSHEETS_QUERY = f"mimeType='{SPREADSHEET_MIME_TYPE}' and 'me' in owners"
DEFAULT_PAGE_SIZE = 100

@dataclass
class SpreadsheetFile(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/drive/api/reference/rest/v3/files#resource:-file
    Only the fields asked for in the listing.
    """
    id: str = field(default="")
    name: str = field(default="")
    owners: List[dict] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.id)

    def __str__(self) -> str:
        return f"{self.name}({self.id})"

class GoogleDrivePermission():
    """
    Translate and validate permission 'enums', the same way
    GoogleSheetsEnum does for the sheets client.
    https://developers.google.com/drive/api/reference/rest/v3/permissions#resource:-permission
    """
    ROLES = ["reader", "commenter", "writer", "owner"]
    TYPES = ["user", "group", "domain", "anyone"]

    @classmethod
    def body(cls, role: str, type: str,
             email: str|None = None, domain: str|None = None) -> dict:
        r = str(role).lower()
        t = str(type).lower()
        if r not in cls.ROLES:
            raise ValueError(f"Invalid permission role: {role}")
        if t not in cls.TYPES:
            raise ValueError(f"Invalid permission type: {type}")
        b = {"role": r, "type": t}
        if t in ("user", "group"):
            if not email:
                raise ValueError(f"An email address is required to share with a {t}")
            b["emailAddress"] = email
        elif t == "domain":
            d = domain or (email.split("@")[-1] if email else "")
            if not d:
                raise ValueError("A domain is required to share with a domain")
            b["domain"] = d
        return b

async def listFiles(access: GWSAccess,
                    q: str = OWNED_SPREADSHEETS_QUERY,
                    pageSize: int = DEFAULT_PAGE_SIZE,
                    policy: RetryPolicy|None = None) -> List[SpreadsheetFile]:
    """
    Wrapper for files.list, following nextPageToken until there isn't one.
    https://developers.google.com/drive/api/reference/rest/v3/files/list
    """
    page_token = None
    flist = []
    files = access.drive.files
    while True:
        args = {"q": q, "fields": "nextPageToken, files(id, name, owners)",
                "pageSize": pageSize}
        if page_token:
            args["pageToken"] = page_token
        response = await run(access, lambda: files().list(**args), policy, "files.list")
        for entry in response.get("files", []):
            flist.append(SpreadsheetFile.from_response(entry))
        page_token = response.get("nextPageToken", None)
        if not page_token:
            break
    return flist

async def deleteFile(access: GWSAccess, fileId: str,
                     policy: RetryPolicy|None = None) -> None:
    """
    Wrapper for files.delete, which skips the trash.
    https://developers.google.com/drive/api/reference/rest/v3/files/delete
    """
    files = access.drive.files
    await run(access, lambda: files().delete(fileId=fileId), policy, "files.delete")

async def createPermission(access: GWSAccess, fileId: str, body: dict,
                           policy: RetryPolicy|None = None) -> dict:
    """
    Wrapper for permissions.create.  Handing over ownership needs
    transferOwnership set or the API refuses.
    https://developers.google.com/drive/api/reference/rest/v3/permissions/create
    """
    permissions = access.drive.permissions
    kwargs = {"fileId": fileId, "body": body}
    if body.get("role") == "owner":
        kwargs["transferOwnership"] = True
    return await run(access, lambda: permissions().create(**kwargs), policy, "permissions.create")
