import pytest
from rdflib import Literal, URIRef
from rdflib.namespace import GEO, RDF, RDFS

from statsectors.config.settings import ContainmentLinkConfig, Settings
from statsectors.errors import GeometrySerializationError
from statsectors.loaders import SectorFeature
from statsectors.triples import RAMON, SPATIAL, FeatureMapper, create_graph

from .conftest import SQUARE

NIS = "http://geo.belgif.org/nis2011/"
NUTS = "http://nuts.geovocab.org/id/"
SUBJECT = URIRef(NIS + "12345#id")


def test_full_entity(mapper, graph, make_feature):
    feature = make_feature(containment={"Nuts3_new": "21004"})

    outcome = mapper.map_feature(feature, graph)

    assert outcome.subject == SUBJECT
    assert set(graph.objects(SUBJECT, RDF.type)) == {RAMON.LAURegion}
    assert set(graph.objects(SUBJECT, SPATIAL.PP)) == {URIRef(NUTS + "21004")}
    assert set(graph.objects(SUBJECT, RDFS.label)) == {
        Literal("Centrum", lang="nl"),
        Literal("Centre", lang="fr"),
    }
    assert list(graph.objects(SUBJECT, GEO.asWKT)) == [
        Literal("POLYGON ((0 0, 1 0, 1 1, 0 1, 0 0))", datatype=GEO.wktLiteral)
    ]
    assert len(graph) == 5
    assert outcome.missing_links == ["Nis_012011"]


def test_float_formatted_code_gives_same_identifier(mapper, graph, make_feature):
    outcome = mapper.map_feature(make_feature(sector_code="12345.0"), graph)
    assert outcome.subject == SUBJECT


def test_missing_sector_code_emits_nothing(mapper, graph, make_feature):
    outcome = mapper.map_feature(make_feature(sector_code=None), graph)

    assert outcome.subject is None
    assert outcome.skipped == "missing_sector_code"
    assert len(graph) == 0


def test_both_containment_links(mapper, graph, make_feature):
    mapper.map_feature(make_feature(containment={"Nuts3_new": "BE100", "Nis_012011": "21004.0"}), graph)

    assert set(graph.objects(SUBJECT, SPATIAL.PP)) == {
        URIRef(NUTS + "BE100"),
        URIRef(NIS + "21004"),
    }


def test_nuts_link_is_not_normalized(mapper, graph, make_feature):
    mapper.map_feature(make_feature(containment={"Nuts3_new": "BE10.0"}), graph)
    assert set(graph.objects(SUBJECT, SPATIAL.PP)) == {URIRef(NUTS + "BE10.0")}


def test_invalid_link_does_not_block_the_rest(mapper, graph, make_feature):
    feature = make_feature(containment={"Nuts3_new": "BE 100", "Nis_012011": "21004"})

    outcome = mapper.map_feature(feature, graph)

    assert outcome.invalid_links == ["Nuts3_new"]
    assert set(graph.objects(SUBJECT, SPATIAL.PP)) == {URIRef(NIS + "21004")}
    assert len(list(graph.objects(SUBJECT, RDFS.label))) == 2
    assert len(list(graph.objects(SUBJECT, GEO.asWKT))) == 1


def test_missing_label_is_skipped_individually(mapper, graph, make_feature):
    outcome = mapper.map_feature(make_feature(labels={"fr": "Centre"}), graph)

    assert set(graph.objects(SUBJECT, RDFS.label)) == {Literal("Centre", lang="fr")}
    assert outcome.missing_labels == ["nl"]


def test_invalid_identifier_skips_feature(mapper, graph, make_feature, caplog):
    outcome = mapper.map_feature(make_feature(sector_code="12 345"), graph)

    assert outcome.skipped == "invalid_identifier"
    assert len(graph) == 0
    assert "Skipping feature 0" in caplog.text


def test_percent_encoding_setting(graph, make_feature):
    settings = Settings()
    settings.identifiers.percent_encode = True

    outcome = FeatureMapper(settings).map_feature(make_feature(sector_code="12 345"), graph)

    assert outcome.subject == URIRef(NIS + "12%20345#id")


def test_geometry_failure_is_fatal_and_leaves_no_triples(mapper, graph, make_feature):
    with pytest.raises(GeometrySerializationError) as info:
        mapper.map_feature(make_feature(geometry=None, index=7), graph)

    assert info.value.feature_index == 7
    assert len(graph) == 0


def test_entity_predicates(mapper, graph, make_feature):
    mapper.map_feature(make_feature(), graph)
    predicates = [p for _, p, _ in graph.triples((SUBJECT, None, None))]
    assert sorted(predicates) == sorted(
        [RDF.type, SPATIAL.PP, SPATIAL.PP, RDFS.label, RDFS.label, GEO.asWKT]
    )


def test_same_code_same_identifier_across_features(mapper, graph, make_feature):
    first = mapper.map_feature(make_feature(sector_code="12345", index=0), graph)
    second = mapper.map_feature(make_feature(sector_code="12345.0", index=1), create_graph())
    assert first.subject == second.subject


def test_map_features_counts(mapper, graph, make_feature):
    features = [
        make_feature(sector_code="1", index=0),
        make_feature(sector_code=None, index=1),
        make_feature(sector_code="2", labels={}, containment={}, index=2),
        make_feature(sector_code="bad code", index=3),
    ]

    stats = mapper.map_features(features, graph)

    assert stats.features_read == 4
    assert stats.entities_emitted == 2
    assert stats.skipped == {"missing_sector_code": 1, "invalid_identifier": 1}
    assert stats.missing_labels == 2
    assert stats.missing_links == 2
    assert stats.triples_emitted == 6 + 2
    assert stats.to_dict()["features_skipped"] == 2


def test_every_entity_has_one_type_and_one_geometry(mapper, graph, make_feature):
    mapper.map_features([make_feature(sector_code=str(code), index=code) for code in range(5)], graph)

    for entity in graph.subjects(RDF.type, RAMON.LAURegion):
        assert len(list(graph.objects(entity, RDF.type))) == 1
        assert len(list(graph.objects(entity, GEO.asWKT))) == 1


def test_custom_schema():
    settings = Settings()
    settings.attributes.sector_code = "CODE"
    settings.attributes.labels = {"de": "NAME_DE"}
    settings.attributes.containment = [
        ContainmentLinkConfig(attribute="REGION", namespace="http://example.org/region/", suffix="#id")
    ]
    settings.namespaces.nis = "http://example.org/sector/"

    feature = SectorFeature.from_record(
        0, {"CODE": "42", "NAME_DE": "Mitte", "REGION": "7"}, SQUARE, settings.attributes
    )
    graph = create_graph(settings.namespaces)
    outcome = FeatureMapper(settings).map_feature(feature, graph)

    subject = URIRef("http://example.org/sector/42#id")
    assert outcome.subject == subject
    assert set(graph.objects(subject, SPATIAL.PP)) == {URIRef("http://example.org/region/7#id")}
    assert set(graph.objects(subject, RDFS.label)) == {Literal("Mitte", lang="de")}
