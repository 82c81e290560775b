class Country:
    def __init__(self, raw):
        self.raw = raw  # Record exactly as the API returned it
        name = raw.get('name') or {}
        self.official_name = name.get('official') or ''
        self.native_name = name.get('nativeName')  # May be missing entirely
        self.cca2 = raw.get('cca2') or ''
        self.cca3 = raw.get('cca3') or ''
        self.alt_spellings = raw.get('altSpellings') or []
        self.idd_root = (raw.get('idd') or {}).get('root') or ''
        self.flag_png = (raw.get('flags') or {}).get('png')

    @classmethod
    def from_dict(cls, raw):
        """Wrap a record, raising ValueError when a consumed field has the wrong shape"""
        if not isinstance(raw, dict):
            raise ValueError(f"Country record must be an object, got {type(raw).__name__}")
        name = raw.get('name')
        if not isinstance(name, dict):
            raise ValueError(f"Country 'name' must be an object, got {type(name).__name__}")
        _check_string(name, 'official', 'name.official')
        native = name.get('nativeName')
        if native is not None:
            if not isinstance(native, dict) or not all(isinstance(e, dict) for e in native.values()):
                raise ValueError("Country 'name.nativeName' must map language codes to objects")
            for code, entry in native.items():
                _check_string(entry, 'official', f"name.nativeName.{code}.official")
        _check_string(raw, 'cca2', 'cca2')
        _check_string(raw, 'cca3', 'cca3')
        for field, inner in (('idd', 'root'), ('flags', 'png')):
            value = raw.get(field)
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ValueError(f"Country '{field}' must be an object")
            _check_string(value, inner, f"{field}.{inner}")
        alt = raw.get('altSpellings')
        if alt is not None and not (isinstance(alt, list) and all(isinstance(s, str) for s in alt)):
            raise ValueError("Country 'altSpellings' must be a list of strings")
        return cls(raw)

    def native_names(self):
        """Official native names in source order, or None when the record has none"""
        if not self.native_name:
            return None
        return ', '.join(entry.get('official') or '' for entry in self.native_name.values())

    def alt_spellings_text(self):
        return ', '.join(self.alt_spellings)

    def to_dict(self):
        return {
            'flag': self.flag_png or None,
            'name': self.official_name,
            'cca2': self.cca2,
            'cca3': self.cca3,
            'nativeName': self.native_names(),
            'altSpellings': self.alt_spellings_text(),
            'idd': self.idd_root
        }

    def __repr__(self):
        return f"Country({self.official_name!r})"


def _check_string(obj, key, label):
    # Missing is fine, present but not text is not
    value = obj.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Country '{label}' must be a string")
