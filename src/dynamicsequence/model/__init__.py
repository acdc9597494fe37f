"""
The MODEL layer contains the container and its storage building blocks.
It has NO knowledge of the whole-sequence algorithms built on top of it.
It deals with Capacity, Allocation, Element Access and Views.
"""
