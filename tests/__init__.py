# SPDX-License-Identifier: Apache-2.0
"""
RAG Index SDK Tests

Behavioural suites for the vector storage adapters (memory, SQLite,
Pinecone via a fake client) and the database facade.
"""
