"""flyrepo data relational — SQL backends."""
