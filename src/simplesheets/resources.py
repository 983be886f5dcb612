from dataclasses import asdict, fields, is_dataclass

class GoogleWorkSpaceResourceBase():
    """
    Intended to be subclassed by a dataclass but isnt actually a dataclass.
    Subclasses mirror a JSON resource of the Sheets or Drive API and only
    need to override fixup() when nested fields need coercing.
    """
    def to_base(self) -> dict:
        """
        Dict representation of the object as needed by the API client.
        Something more complicated can override.
        Call fixup() first to ensure all fields are in correct format.
        """
        self.fixup()
        return asdict(self)

    def trim(self) -> dict:
        """
        Return a 'trimmed' dict of the resource, dropping top level attributes
        that are None or an empty string/container.  Numbers and bools are kept
        as 0/False are valid values.  Request bodies want only the fields that
        are actually set, e.g. an addSheet with no index.
        """
        b = self.to_base()
        for k, v in list(b.items()):
            if v is None or (type(v) not in [int, bool, float] and not v):
                del b[k]
        return b

    def fixup(self) -> None:
        """
        notify a subclass to do any field adjustments
        """
        pass

    @classmethod
    def from_response(cls, response: dict|None):
        """
        Build from an API response dict, ignoring any keys the dataclass
        doesn't declare.  The API adds fields over time and we don't want
        a TypeError every time it does.
        """
        known = {f.name for f in fields(cls)} if is_dataclass(cls) else set()
        return cls(**{k: v for k, v in dict(response or {}).items() if k in known})

