class BundleError(Exception):
    pass


class ArchiveFormatError(BundleError):
    pass


class EntryDecodeError(BundleError):
    pass


class MissingEntryError(BundleError, KeyError):
    def __str__(self):
        return Exception.__str__(self)


class InvalidMetadataError(BundleError):
    pass


class ExternalServiceError(BundleError):
    pass
