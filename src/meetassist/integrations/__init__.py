"""Calendar provider connections and (mock) event sync."""
