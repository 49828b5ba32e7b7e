"""Financial advisor request handling: tool client, fan-out and HTTP surface."""
