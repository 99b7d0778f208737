"""
EPP XML Parser

Parses EPP greetings and responses per RFC 5730 into raw models.
Object-specific data is left as elements for the typed responses.
"""

import logging
from typing import List, Optional

from lxml import etree

from epp_session.exceptions import EPPXMLError
from epp_session.models import Greeting, PollMessage, Response, Result
from epp_session.objects.base import parse_datetime

logger = logging.getLogger("epp.parser")

NS = {
    "epp": "urn:ietf:params:xml:ns:epp-1.0",
}

# Secure parser
_parser = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_blank_text=True,
)


def _find_text(elem: etree._Element, path: str, default: str = None) -> Optional[str]:
    found = elem.find(path, NS)
    if found is not None and found.text:
        return found.text.strip()
    return default


def _find_all_text(elem: etree._Element, path: str) -> List[str]:
    return [e.text.strip() for e in elem.findall(path, NS) if e.text]


def _parse_xml(xml_data: bytes) -> etree._Element:
    try:
        return etree.fromstring(xml_data, _parser)
    except etree.XMLSyntaxError as e:
        raise EPPXMLError(f"XML parse error: {e}")


def _parse_result(result: etree._Element) -> Result:
    try:
        code = int(result.get("code", ""))
    except ValueError:
        raise EPPXMLError(f"Invalid result code: {result.get('code')!r}")

    reason = None
    ext_value = result.find("epp:extValue", NS)
    if ext_value is not None:
        reason = _find_text(ext_value, "epp:reason")

    return Result(
        code=code,
        message=_find_text(result, "epp:msg", ""),
        reason=reason,
    )


class XMLParser:
    """
    Parses EPP XML replies.

    All methods are static and return model objects.
    """

    @staticmethod
    def parse_greeting(xml_data: bytes) -> Greeting:
        """
        Parse EPP greeting.

        Raises:
            EPPXMLError: If the document is not a greeting
        """
        root = _parse_xml(xml_data)

        greeting = root.find("epp:greeting", NS)
        if greeting is None:
            raise EPPXMLError("No greeting element found")

        return Greeting(
            server_id=_find_text(greeting, "epp:svID", ""),
            server_date=parse_datetime(_find_text(greeting, "epp:svDate")),
            version=_find_all_text(greeting, "epp:svcMenu/epp:version"),
            lang=_find_all_text(greeting, "epp:svcMenu/epp:lang"),
            obj_uris=_find_all_text(greeting, "epp:svcMenu/epp:objURI"),
            ext_uris=_find_all_text(greeting, "epp:svcMenu/epp:svcExtension/epp:extURI"),
            raw_xml=xml_data,
        )

    @staticmethod
    def parse_response(xml_data: bytes) -> Response:
        """
        Parse EPP response.

        Raises:
            EPPXMLError: If the document is not a response or has no result
        """
        root = _parse_xml(xml_data)

        response = root.find("epp:response", NS)
        if response is None:
            raise EPPXMLError("No response element found")

        results = [_parse_result(r) for r in response.findall("epp:result", NS)]
        if not results:
            raise EPPXMLError("No result element found")

        cl_trid = sv_trid = None
        trn_id = response.find("epp:trID", NS)
        if trn_id is not None:
            cl_trid = _find_text(trn_id, "epp:clTRID")
            sv_trid = _find_text(trn_id, "epp:svTRID")

        return Response(
            code=results[0].code,
            message=results[0].message,
            results=results,
            cl_trid=cl_trid,
            sv_trid=sv_trid,
            res_data=response.find("epp:resData", NS),
            extension=response.find("epp:extension", NS),
            msg_queue=XMLParser._parse_msg_queue(response),
            raw_xml=xml_data,
        )

    @staticmethod
    def _parse_msg_queue(response: etree._Element) -> Optional[PollMessage]:
        msg_q = response.find("epp:msgQ", NS)
        if msg_q is None:
            return None

        try:
            count = int(msg_q.get("count", "0"))
        except ValueError:
            logger.warning(f"Invalid msgQ count: {msg_q.get('count')!r}")
            count = 0

        return PollMessage(
            id=msg_q.get("id", ""),
            count=count,
            qdate=parse_datetime(_find_text(msg_q, "epp:qDate")),
            message=_find_text(msg_q, "epp:msg", ""),
        )
