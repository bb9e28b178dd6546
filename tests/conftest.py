import pytest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient


# --- Canned API responses ---

QUERY_RESULT_XML = b"""<?xml version='1.0' encoding='UTF-8'?>
<queryresult success='true'
    error='false'
    numpods='2'
    datatypes='Quantity,UnitConversion'
    timedout='Conversions,Comparisons'
    timedoutpods=''
    timing='1.234'
    parsetiming='0.25'
    parsetimedout='false'
    recalculate='http://www4b.wolframalpha.com/api/v2/recalc.jsp?id=MSPa1'
    id='MSPa123'
    host='https://www4b.wolframalpha.com'
    server='21'
    related='http://www4b.wolframalpha.com/api/v2/relatedQueries.jsp?id=MSPa2'
    version='2.6'>
 <pod title='Input interpretation'
     scanner='Identity'
     id='Input'
     position='100'
     error='false'
     numsubpods='1'>
  <subpod title=''>
   <plaintext>convert 10 feet to meters</plaintext>
   <img src='http://www4b.wolframalpha.com/Calculate/MSP/MSP3?MSPStoreType=image/gif&amp;s=21'
       alt='convert 10 feet to meters'
       title='convert 10 feet to meters'
       width='180'
       height='32' />
  </subpod>
 </pod>
 <pod title='Result'
     scanner='Identity'
     id='Result'
     position='200'
     error='false'
     numsubpods='1'
     primary='true'>
  <subpod title='' primary='true'>
   <plaintext>3.048 meters</plaintext>
   <mathml><math xmlns='http://www.w3.org/1998/Math/MathML'><mn>3.048</mn></math></mathml>
   <minput>UnitConvert[Quantity[10, "Feet"], "Meters"]</minput>
   <moutput>Quantity[3.048, "Meters"]</moutput>
  </subpod>
 </pod>
 <assumptions count='1'>
  <assumption type='Clash' word='feet' template='Assuming ${desc1}. Use as ${desc2} instead' count='3'>
   <value name='Unit' desc='a unit' input='*C.feet-_*Unit-' />
   <value name='Word' desc='a word' input='*C.feet-_*Word-' />
   <value name='Body' desc='a body part' input='*C.feet-_*BodyPart-' />
  </assumption>
 </assumptions>
 <sources count='1'>
  <source url='http://www.wolframalpha.com/sources/UnitDataSourceInformationNotes.html'
      text='Unit data' />
 </sources>
</queryresult>
"""

FAILED_RESULT_XML = b"""<?xml version='1.0' encoding='UTF-8'?>
<queryresult success='false' error='false' numpods='0' datatypes='' timedout=''
    timing='0.5' parsetiming='0.1' parsetimedout='false' recalculate='' id='' version='2.6'>
 <didyoumeans count='2'>
  <didyoumean score='0.8' level='medium'>blue moon</didyoumean>
  <didyoumean score='0.5' level='low'>mustang</didyoumean>
 </didyoumeans>
 <reinterpret text='Using closest Wolfram|Alpha interpretation:' new='mustang moon' score='0.416667' level='medium' />
 <tips count='2'>
  <tip text='Check your spelling, and use English' />
  <tip text='Try a simpler query' />
 </tips>
 <languagemsg english='Wolfram|Alpha does not yet support German.' other='Wolfram|Alpha versteht noch kein Deutsch.' />
 <futuretopic topic='Operating Systems' msg='Development of this topic is under investigation...' />
 <examplepage category='ChemicalCompounds' url='http://wolframalpha.com/examples/ChemicalCompounds-content.html' />
</queryresult>
"""

APPID_ERROR_XML = b"""<?xml version='1.0' encoding='UTF-8'?>
<queryresult success='false' error='true' numpods='0' datatypes='' timedout='' timing='0.01'
    parsetiming='0.' parsetimedout='false' recalculate='' id='' version='2.6'>
 <error>
  <code>1</code>
  <msg>Invalid appid</msg>
 </error>
</queryresult>
"""

VALIDATE_RESULT_XML = b"""<?xml version='1.0' encoding='UTF-8'?>
<validatequeryresult success='true' error='false' timing='0.05' parsetiming='0.04' version='2.6'>
 <assumptions count='0' />
</validatequeryresult>
"""


def make_response(status_code: int = 200, content: bytes = QUERY_RESULT_XML) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = content
    resp.text = content.decode("utf-8")
    return resp


@pytest.fixture
def mock_get(mocker):
    """Patched requests.get for the Wolfram Alpha service, answering with QUERY_RESULT_XML."""
    return mocker.patch(
        "alphaquery.services.wolfram.requests.get",
        return_value=make_response(),
    )


@pytest.fixture
def mock_settings(mocker):
    settings = MagicMock()
    settings.wolfram_app_id = "TEST-APPID"
    settings.wolfram_api_base = "https://api.wolframalpha.com"
    settings.request_timeout = 5.0
    mocker.patch("alphaquery.services.wolfram.get_settings", return_value=settings)
    return settings


@pytest.fixture
def api_client():
    """FastAPI TestClient for router tests."""
    from alphaquery.main import api
    return TestClient(api)
