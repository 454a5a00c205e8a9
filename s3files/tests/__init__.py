"""
Tests Module: Unit Tests

Test Coverage:
    - Key building and name resolution
    - Configuration, errors, logging
    - Upload adapters and ObjectStream
    - InMemoryS3Client behaviour
    - S3FileManager operations
    - Command line
"""
