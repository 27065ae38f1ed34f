"""Built-in hint sources for common Spring Boot configurations.

Each factory returns a StaticHintSource. Imported configuration classes name
their importer as trigger so that mere presence on the classpath does not
activate them.
"""

from __future__ import annotations

from src.hints.model import (
    AccessLevel,
    AccessRequest,
    AllOfCondition,
    ConfigurationUnit,
    HintRecord,
    PropertyCondition,
    TypePresentCondition,
    UnitKind,
)

from .base import StaticHintSource

_BOOT = "org.springframework.boot"
_AUTOCONFIGURE = f"{_BOOT}.autoconfigure"

# Access needed to instantiate a bean and call its accessors reflectively
_BEAN_ACCESS = AccessLevel.PUBLIC_CONSTRUCTORS | AccessLevel.PUBLIC_METHODS
_CONFIG_CLASS_ACCESS = (
    AccessLevel.CLASS_METADATA | AccessLevel.DECLARED_CONSTRUCTORS | AccessLevel.DECLARED_METHODS
)


def spring_core() -> StaticHintSource:
    """Hints every Spring Boot application needs."""
    return StaticHintSource(
        "spring-core",
        units=[
            ConfigurationUnit(
                name="SpringApplicationHints",
                requests=(
                    AccessRequest.of(f"{_BOOT}.SpringApplication", _BEAN_ACCESS),
                    AccessRequest.of(
                        "org.springframework.context.annotation.ConfigurationClassPostProcessor",
                        _BEAN_ACCESS,
                    ),
                    AccessRequest.of("META-INF/spring.factories", AccessLevel.LOADABLE_AS_RESOURCE),
                ),
            ),
        ],
        records=[
            HintRecord(
                unit="ConfigurationPropertiesHints",
                trigger=TypePresentCondition(
                    type_name=f"{_BOOT}.context.properties.ConfigurationProperties"
                ),
                requests=(
                    AccessRequest.of(
                        f"{_BOOT}.context.properties.ConfigurationPropertiesBindingPostProcessor",
                        _BEAN_ACCESS,
                    ),
                ),
                source="spring-core",
            ),
        ],
    )


def spring_xml() -> StaticHintSource:
    """XML parser factories, unless XML support is switched off with spring.xml.ignore."""
    xml_enabled = AllOfCondition(
        conditions=(
            TypePresentCondition(type_name="javax.xml.parsers.SAXParserFactory"),
            PropertyCondition(key="spring.xml.ignore", having_value="false", match_if_missing=True),
        )
    )
    return StaticHintSource(
        "spring-xml",
        units=[
            ConfigurationUnit(
                name="XmlSupportHints",
                condition=xml_enabled,
                requests=(
                    AccessRequest.of("javax.xml.parsers.SAXParserFactory", AccessLevel.PUBLIC_METHODS),
                    AccessRequest.of("javax.xml.parsers.DocumentBuilderFactory", AccessLevel.PUBLIC_METHODS),
                    AccessRequest.of(
                        "com.sun.org.apache.xerces.internal.jaxp.SAXParserFactoryImpl",
                        AccessLevel.PUBLIC_CONSTRUCTORS,
                    ),
                    AccessRequest.of(
                        "com.sun.org.apache.xerces.internal.jaxp.DocumentBuilderFactoryImpl",
                        AccessLevel.PUBLIC_CONSTRUCTORS,
                    ),
                ),
            ),
        ],
    )


def spring_jackson() -> StaticHintSource:
    """Jackson auto-configuration and the ObjectMapper it builds."""
    return StaticHintSource(
        "spring-jackson",
        units=[
            ConfigurationUnit(
                name="JacksonAutoConfiguration",
                kind=UnitKind.CONFIGURATION,
                type_name=f"{_AUTOCONFIGURE}.jackson.JacksonAutoConfiguration",
                condition=TypePresentCondition(
                    type_name="com.fasterxml.jackson.databind.ObjectMapper"
                ),
                imports=("JacksonObjectMapperConfiguration",),
                requests=(
                    AccessRequest.of(
                        f"{_AUTOCONFIGURE}.jackson.JacksonAutoConfiguration", _CONFIG_CLASS_ACCESS
                    ),
                    AccessRequest.of("com.fasterxml.jackson.databind.ObjectMapper", _BEAN_ACCESS),
                ),
            ),
            ConfigurationUnit(
                name="JacksonObjectMapperConfiguration",
                kind=UnitKind.CONFIGURATION,
                type_name=(
                    f"{_AUTOCONFIGURE}.jackson.JacksonAutoConfiguration"
                    "$JacksonObjectMapperConfiguration"
                ),
                trigger="JacksonAutoConfiguration",
                requests=(
                    AccessRequest.of(
                        f"{_AUTOCONFIGURE}.jackson.JacksonAutoConfiguration"
                        "$JacksonObjectMapperConfiguration",
                        _CONFIG_CLASS_ACCESS,
                    ),
                    AccessRequest.of(
                        "org.springframework.http.converter.json.Jackson2ObjectMapperBuilder",
                        AccessLevel.PUBLIC_METHODS,
                    ),
                ),
            ),
        ],
    )


def spring_webmvc() -> StaticHintSource:
    """Servlet web stack, active for servlet web applications."""
    servlet_app = AllOfCondition(
        conditions=(
            TypePresentCondition(type_name="org.springframework.web.servlet.DispatcherServlet"),
            PropertyCondition(
                key="spring.main.web-application-type",
                having_value="servlet",
                match_if_missing=True,
            ),
        )
    )
    return StaticHintSource(
        "spring-webmvc",
        units=[
            ConfigurationUnit(
                name="WebMvcAutoConfiguration",
                kind=UnitKind.CONFIGURATION,
                type_name=f"{_AUTOCONFIGURE}.web.servlet.WebMvcAutoConfiguration",
                condition=servlet_app,
                imports=("JacksonAutoConfiguration",),
                requests=(
                    AccessRequest.of(
                        f"{_AUTOCONFIGURE}.web.servlet.WebMvcAutoConfiguration", _CONFIG_CLASS_ACCESS
                    ),
                    AccessRequest.of("org.springframework.web.servlet.DispatcherServlet", _BEAN_ACCESS),
                ),
            ),
        ],
        records=[
            HintRecord(
                unit="WebMvcAutoConfiguration",
                requests=(
                    AccessRequest.of(
                        "org.springframework.web.bind.annotation.RestController",
                        AccessLevel.CLASS_METADATA | AccessLevel.PUBLIC_METHODS,
                    ),
                    AccessRequest.of("static/", AccessLevel.LOADABLE_AS_RESOURCE),
                ),
                source="spring-webmvc",
            ),
        ],
    )
