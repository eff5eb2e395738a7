"""objstore: async bucket and object operations over S3-compatible storage."""
