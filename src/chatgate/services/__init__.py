"""
Services hosted by chatgate nodes: the gateway and the two workers.
"""
