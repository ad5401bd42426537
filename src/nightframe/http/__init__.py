"""HTTP primitives: immutable requests, headers, and the response writer."""
