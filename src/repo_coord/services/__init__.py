"""Planning services: topology, classification, graph assembly, scheduling, risk."""
