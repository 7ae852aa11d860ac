"""SPARQL bodies for every catalogue operation.

Grouped the way the catalogue is browsed: model structure (ontologies),
controlled vocabularies, data catalogues, and the analysis queries.
"""

from __future__ import annotations

from schemagov.templates import DCATAPIT, QueryTemplate

# ── Exploration ───────────────────────────────────────────────────

EXPLORE_CLASSES = QueryTemplate(
    name="explore_classes",
    body="""
SELECT DISTINCT ?class (COUNT(?s) AS ?count)
WHERE {
  ?s a ?class .
  ${filter}
}
GROUP BY ?class
ORDER BY DESC(?count)
LIMIT ${limit}
""",
    params=frozenset({"limit", "filter"}),
    clauses={"filter": 'FILTER(REGEX(STR(?class), "${filter}", "i"))'},
)

CATALOG_GRAPHS = QueryTemplate(
    name="graphs",
    body="""
SELECT DISTINCT ?g
WHERE {
  GRAPH ?g { ?s ?p ?o }
}
LIMIT 100
""",
)

CATALOG_ONTOLOGIES = QueryTemplate(
    name="ontologies",
    body="""
SELECT DISTINCT ?s ?type
WHERE {
  VALUES ?type { owl:Ontology skos:ConceptScheme }
  ?s a ?type .
}
LIMIT 100
""",
)

COVERAGE_TARGET = QueryTemplate(
    name="coverage",
    body="""
SELECT (COUNT(DISTINCT ?s) AS ?instances) (COUNT(DISTINCT ?p) AS ?propertiesUsed)
WHERE {
  { ?s a <${target_uri}> }
  UNION
  { ?s <${target_uri}> ?o }
  UNION
  { ?sub <${target_uri}> ?obj }
}
""",
    params=frozenset({"target_uri"}),
)

COVERAGE_GLOBAL = QueryTemplate(
    name="coverage",
    body="""
SELECT ?type (COUNT(?s) AS ?count)
WHERE {
  ?s a ?type .
}
GROUP BY ?type
ORDER BY DESC(?count)
LIMIT 50
""",
)

CHECK_QUALITY = QueryTemplate(
    name="check_quality",
    body="""
SELECT ?s ?type ?issue
WHERE {
  VALUES ?type { owl:Class owl:ObjectProperty owl:DatatypeProperty skos:Concept }
  ?s a ?type .
  FILTER NOT EXISTS { ?s rdfs:label ?label }
  FILTER NOT EXISTS { ?s skos:prefLabel ?label }
  BIND("Missing Label" AS ?issue)
}
LIMIT ${limit}
""",
    params=frozenset({"limit"}),
)

CHECK_OVERLAPS = QueryTemplate(
    name="check_overlaps",
    body="""
SELECT ?s1 ?s2 ?label ?relation
WHERE {
  {
    ?s1 owl:sameAs ?s2 .
    BIND("owl:sameAs" AS ?relation)
  }
  UNION
  {
    ?s1 skos:exactMatch ?s2 .
    BIND("skos:exactMatch" AS ?relation)
  }
  UNION
  {
    ?s1 rdfs:label ?label .
    ?s2 rdfs:label ?label .
    FILTER (?s1 != ?s2)
    BIND("Same Label" AS ?relation)
  }
}
LIMIT ${limit}
""",
    params=frozenset({"limit"}),
)

# ── Model structure (ontologies) ──────────────────────────────────

LIST_ONTOLOGIES = QueryTemplate(
    name="list_ontologies",
    body="""
SELECT DISTINCT ?ont ?label
WHERE {
  ?ont a owl:Ontology .
  OPTIONAL { ?ont rdfs:label|dct:title ?label }
}
ORDER BY ?label
LIMIT ${limit}
""",
    params=frozenset({"limit"}),
)

# Members are matched by namespace: their URI starts with the ontology URI.
EXPLORE_ONTOLOGY = QueryTemplate(
    name="explore_ontology",
    body="""
SELECT DISTINCT ?type ?item ?label
WHERE {
  VALUES ?type { owl:Class owl:ObjectProperty owl:DatatypeProperty }
  ?item a ?type .
  OPTIONAL { ?item rdfs:label ?label }
  FILTER(STRSTARTS(STR(?item), "${ontology_uri}"))
}
ORDER BY ?type ?item
LIMIT 200
""",
    params=frozenset({"ontology_uri"}),
)

# ── Controlled vocabularies ───────────────────────────────────────

LIST_VOCABULARIES = QueryTemplate(
    name="list_vocabularies",
    body="""
SELECT DISTINCT ?scheme ?label (COUNT(?c) AS ?count)
WHERE {
  ?scheme a skos:ConceptScheme .
  OPTIONAL { ?scheme rdfs:label|dct:title ?label }
  OPTIONAL { ?c skos:inScheme ?scheme }
}
GROUP BY ?scheme ?label
ORDER BY DESC(?count)
LIMIT ${limit}
""",
    params=frozenset({"limit"}),
)

SEARCH_IN_VOCABULARY = QueryTemplate(
    name="search_in_vocabulary",
    body="""
SELECT DISTINCT ?concept ?label ?code
WHERE {
  ?concept skos:inScheme <${scheme_uri}> .
  ?concept rdfs:label|skos:prefLabel ?label .
  OPTIONAL { ?concept skos:notation|dct:identifier ?code }
  FILTER(REGEX(STR(?label), "${keyword}", "i"))
}
ORDER BY ?label
LIMIT ${limit}
""",
    params=frozenset({"scheme_uri", "keyword", "limit"}),
)

# ── Data catalogues (datasets) ────────────────────────────────────

LIST_DATASETS = QueryTemplate(
    name="list_datasets",
    body=f"""
SELECT DISTINCT ?dataset ?label
WHERE {{
  ?dataset a <{DCATAPIT}Dataset> .
  OPTIONAL {{ ?dataset dct:title ?label }}
}}
ORDER BY ?label
LIMIT ${{limit}}
OFFSET ${{offset}}
""",
    params=frozenset({"limit", "offset"}),
)

DATASET_METADATA = QueryTemplate(
    name="metadata",
    body=f"""
SELECT ?p ?o
WHERE {{
  <${{dataset_uri}}> ?p ?o .
  FILTER (ISLITERAL(?o) || (ISURI(?o) && EXISTS {{ ?o a <{DCATAPIT}Distribution> }}))
}}
LIMIT 100
""",
    params=frozenset({"dataset_uri"}),
)

DATASET_DISTRIBUTIONS = QueryTemplate(
    name="distributions",
    body=f"""
SELECT ?dist ?format ?url
WHERE {{
  ?dist a <{DCATAPIT}Distribution> .
  <${{dataset_uri}}> dcat:distribution ?dist .
  OPTIONAL {{ ?dist dct:format ?format }}
  OPTIONAL {{ ?dist dcat:downloadURL ?url }}
}}
LIMIT 20
""",
    params=frozenset({"dataset_uri"}),
)

# ── Concept search and inspection ─────────────────────────────────

SEARCH_CONCEPTS = QueryTemplate(
    name="search_concepts",
    body="""
SELECT DISTINCT ?subject ?type ?label
WHERE {
  VALUES ?type { owl:Class owl:ObjectProperty owl:DatatypeProperty skos:Concept }
  ?subject a ?type .
  ?subject rdfs:label|skos:prefLabel|dct:title ?label .
  FILTER(REGEX(STR(?label), "${keyword}", "i"))
}
LIMIT ${limit}
""",
    params=frozenset({"keyword", "limit"}),
)

# Profile sections, in the order they are executed and reported.
CONCEPT_PROFILE: tuple[QueryTemplate, ...] = (
    QueryTemplate(
        name="definition",
        body="""
SELECT ?p ?o WHERE { <${uri}> ?p ?o . FILTER(ISLITERAL(?o)) }
""",
        params=frozenset({"uri"}),
    ),
    QueryTemplate(
        name="hierarchy",
        body="""
SELECT ?type ?parent ?child WHERE {
  { <${uri}> a ?type }
  UNION
  { <${uri}> rdfs:subClassOf|skos:broader ?parent }
  UNION
  { ?child rdfs:subClassOf|skos:broader <${uri}> }
} LIMIT 50
""",
        params=frozenset({"uri"}),
    ),
    QueryTemplate(
        name="usage",
        body="""
SELECT (COUNT(?s) AS ?instanceCount) WHERE { ?s a <${uri}> }
""",
        params=frozenset({"uri"}),
    ),
    QueryTemplate(
        name="incoming",
        body="""
SELECT DISTINCT ?p ?sType WHERE {
  ?s ?p ?o .
  ?o a <${uri}> .
  OPTIONAL { ?s a ?sType }
} LIMIT 20
""",
        params=frozenset({"uri"}),
    ),
    QueryTemplate(
        name="outgoing",
        body="""
SELECT DISTINCT ?p ?oType WHERE {
  ?s a <${uri}> .
  ?s ?p ?o .
  OPTIONAL { ?o a ?oType }
} LIMIT 20
""",
        params=frozenset({"uri"}),
    ),
)

FIND_RELATIONS = QueryTemplate(
    name="find_relations",
    body="""
SELECT ?p1 ?mid ?p2
WHERE {
  {
    <${source_uri}> ?p1 <${target_uri}> .
    BIND("DIRECT" AS ?mid)
    BIND("NONE" AS ?p2)
  }
  UNION
  {
    <${source_uri}> ?p1 ?mid .
    ?mid ?p2 <${target_uri}> .
  }
}
LIMIT 10
""",
    params=frozenset({"source_uri", "target_uri"}),
)

# ── Structural heuristics ─────────────────────────────────────────

UNUSED_CLASSES = QueryTemplate(
    name="unused_classes",
    body="""
SELECT ?class (COUNT(?s) AS ?instances)
WHERE {
  ?class a owl:Class .
  FILTER NOT EXISTS { ?s a ?class }
  FILTER NOT EXISTS { ?sub rdfs:subClassOf ?class }
}
GROUP BY ?class
LIMIT ${limit}
""",
    params=frozenset({"limit"}),
)

# Two-step subclass cycles only (A ⊑ B, B ⊑ A).
POSSIBLE_CYCLES = QueryTemplate(
    name="possible_cycles",
    body="""
SELECT ?a ?b
WHERE {
  ?a rdfs:subClassOf ?b .
  ?b rdfs:subClassOf ?a .
  FILTER (?a != ?b)
}
LIMIT ${limit}
""",
    params=frozenset({"limit"}),
)
